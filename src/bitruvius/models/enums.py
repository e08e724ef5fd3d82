"""Enumerations used throughout Bitruvius."""

from enum import StrEnum


class Joint(StrEnum):
    WAIST = "waist"
    TORSO = "torso"
    COLLAR = "collar"
    NECK = "neck"
    L_SHOULDER = "l_shoulder"
    L_ELBOW = "l_elbow"
    L_HAND = "l_hand"
    R_SHOULDER = "r_shoulder"
    R_ELBOW = "r_elbow"
    R_HAND = "r_hand"
    L_HIP = "l_hip"
    L_KNEE = "l_knee"
    L_FOOT = "l_foot"
    L_TOE = "l_toe"
    R_HIP = "r_hip"
    R_KNEE = "r_knee"
    R_FOOT = "r_foot"
    R_TOE = "r_toe"


class BodyPart(StrEnum):
    HEAD = "head"
    COLLAR = "collar"
    TORSO = "torso"
    WAIST = "waist"
    L_UPPER_ARM = "l_upper_arm"
    L_LOWER_ARM = "l_lower_arm"
    L_HAND = "l_hand"
    R_UPPER_ARM = "r_upper_arm"
    R_LOWER_ARM = "r_lower_arm"
    R_HAND = "r_hand"
    L_UPPER_LEG = "l_upper_leg"
    L_LOWER_LEG = "l_lower_leg"
    L_FOOT = "l_foot"
    L_TOE = "l_toe"
    R_UPPER_LEG = "r_upper_leg"
    R_LOWER_LEG = "r_lower_leg"
    R_FOOT = "r_foot"
    R_TOE = "r_toe"


class JointMode(StrEnum):
    FK = "fk"
    BEND = "bend"
    STRETCH = "stretch"


class Side(StrEnum):
    LEFT = "l"
    RIGHT = "r"


class Axis(StrEnum):
    WIDTH = "w"
    HEIGHT = "h"


class InteractionState(StrEnum):
    IDLE = "idle"
    DRAGGING = "dragging"
    CALIBRATING = "calibrating"
    PLAYING_TIMELAPSE = "playing_timelapse"


class AssetKind(StrEnum):
    MASK = "mask"
    BACKGROUND = "background"
