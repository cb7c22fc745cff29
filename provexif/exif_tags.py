# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF tag definitions

Tag codes recognised in IFD0, the EXIF sub-IFD and the GPS sub-IFD.
Tags not listed here are skipped by the walker.

Copyright 2025 DNAi inc.
"""

# ============================================================
# IFD0 (primary image) tags
# ============================================================
PROCESSING_SOFTWARE = 0x000B
IMAGE_WIDTH = 0x0100
IMAGE_HEIGHT = 0x0101
IMAGE_DESCRIPTION = 0x010E
MAKE = 0x010F
MODEL = 0x0110
ORIENTATION = 0x0112
SOFTWARE = 0x0131
MODIFY_DATE = 0x0132
ARTIST = 0x013B
COPYRIGHT = 0x8298
EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825
XP_TITLE = 0x9C9B
XP_COMMENT = 0x9C9C
XP_AUTHOR = 0x9C9D
XP_KEYWORDS = 0x9C9E
XP_SUBJECT = 0x9C9F

# ============================================================
# EXIF sub-IFD tags
# ============================================================
EXPOSURE_TIME = 0x829A
F_NUMBER = 0x829D
EXPOSURE_PROGRAM = 0x8822
ISO = 0x8827
EXIF_VERSION = 0x9000
DATE_CAPTURED = 0x9003
CREATE_DATE = 0x9004
OFFSET_TIME = 0x9010
OFFSET_TIME_ORIGINAL = 0x9011
OFFSET_TIME_DIGITIZED = 0x9012
COMPONENTS_CONFIGURATION = 0x9101
METERING_MODE = 0x9207
LIGHT_SOURCE = 0x9208
FLASH = 0x9209
FOCAL_LENGTH = 0x920A
MAKER_NOTE = 0x927C
USER_COMMENT = 0x9286
SUB_SEC_TIME = 0x9290
SUB_SEC_TIME_ORIGINAL = 0x9291
SUB_SEC_TIME_DIGITIZED = 0x9292
FLASHPIX_VERSION = 0xA000
COLOR_SPACE = 0xA001
PIXEL_X_DIMENSION = 0xA002
PIXEL_Y_DIMENSION = 0xA003
RELATED_SOUND_FILE = 0xA004
FILE_SOURCE = 0xA300
SCENE_TYPE = 0xA301
WHITE_BALANCE = 0xA403
DIGITAL_ZOOM_RATIO = 0xA404
SCENE_CAPTURE_TYPE = 0xA406
CONTRAST = 0xA408
SATURATION = 0xA409
SHARPNESS = 0xA40A
SUBJECT_DISTANCE_RANGE = 0xA40C
IMAGE_UNIQUE_ID = 0xA420
BODY_SERIAL_NUMBER = 0xA431
LENS_INFO = 0xA432
LENS_MAKE = 0xA433
LENS_MODEL = 0xA434
LENS_SERIAL_NUMBER = 0xA435
IMAGE_EDITOR = 0xA438
CAMERA_FIRMWARE = 0xA439
COMPOSITE_IMAGE = 0xA460
COMPOSITE_IMAGE_COUNT = 0xA461
SERIAL_NUMBER = 0xFDE9

# ============================================================
# GPS sub-IFD tags
# ============================================================
GPS_VERSION_ID = 0x0000
GPS_LATITUDE_REF = 0x0001
GPS_LATITUDE = 0x0002
GPS_LONGITUDE_REF = 0x0003
GPS_LONGITUDE = 0x0004
GPS_ALTITUDE_REF = 0x0005
GPS_ALTITUDE = 0x0006
GPS_TIMESTAMP = 0x0007
GPS_SPEED_REF = 0x000C
GPS_SPEED = 0x000D
GPS_IMG_DIRECTION_REF = 0x0010
GPS_IMG_DIRECTION = 0x0011
GPS_MAP_DATUM = 0x0012
GPS_DEST_LATITUDE_REF = 0x0013
GPS_DEST_LATITUDE = 0x0014
GPS_DEST_LONGITUDE_REF = 0x0015
GPS_DEST_LONGITUDE = 0x0016
GPS_DEST_BEARING_REF = 0x0017
GPS_DEST_BEARING = 0x0018
GPS_DEST_DISTANCE_REF = 0x0019
GPS_DEST_DISTANCE = 0x001A
GPS_PROCESSING_METHOD = 0x001B
GPS_DATESTAMP = 0x001D
GPS_DIFFERENTIAL = 0x001E


PRIMARY_TAG_NAMES = {
    PROCESSING_SOFTWARE: "ProcessingSoftware",
    IMAGE_WIDTH: "ImageWidth",
    IMAGE_HEIGHT: "ImageHeight",
    IMAGE_DESCRIPTION: "ImageDescription",
    MAKE: "Make",
    MODEL: "Model",
    ORIENTATION: "Orientation",
    SOFTWARE: "Software",
    MODIFY_DATE: "ModifyDate",
    ARTIST: "Artist",
    COPYRIGHT: "Copyright",
    EXIF_IFD_POINTER: "ExifIFD",
    GPS_IFD_POINTER: "GPSIFD",
    XP_TITLE: "XPTitle",
    XP_COMMENT: "XPComment",
    XP_AUTHOR: "XPAuthor",
    XP_KEYWORDS: "XPKeywords",
    XP_SUBJECT: "XPSubject",
}

EXIF_TAG_NAMES = {
    EXPOSURE_TIME: "ExposureTime",
    F_NUMBER: "FNumber",
    EXPOSURE_PROGRAM: "ExposureProgram",
    ISO: "ISO",
    EXIF_VERSION: "ExifVersion",
    DATE_CAPTURED: "DateTimeOriginal",
    CREATE_DATE: "CreateDate",
    OFFSET_TIME: "OffsetTime",
    OFFSET_TIME_ORIGINAL: "OffsetTimeOriginal",
    OFFSET_TIME_DIGITIZED: "OffsetTimeDigitized",
    COMPONENTS_CONFIGURATION: "ComponentsConfiguration",
    METERING_MODE: "MeteringMode",
    LIGHT_SOURCE: "LightSource",
    FLASH: "Flash",
    FOCAL_LENGTH: "FocalLength",
    MAKER_NOTE: "MakerNote",
    USER_COMMENT: "UserComment",
    SUB_SEC_TIME: "SubSecTime",
    SUB_SEC_TIME_ORIGINAL: "SubSecTimeOriginal",
    SUB_SEC_TIME_DIGITIZED: "SubSecTimeDigitized",
    FLASHPIX_VERSION: "FlashpixVersion",
    COLOR_SPACE: "ColorSpace",
    PIXEL_X_DIMENSION: "PixelXDimension",
    PIXEL_Y_DIMENSION: "PixelYDimension",
    RELATED_SOUND_FILE: "RelatedSoundFile",
    FILE_SOURCE: "FileSource",
    SCENE_TYPE: "SceneType",
    WHITE_BALANCE: "WhiteBalance",
    DIGITAL_ZOOM_RATIO: "DigitalZoomRatio",
    SCENE_CAPTURE_TYPE: "SceneCaptureType",
    CONTRAST: "Contrast",
    SATURATION: "Saturation",
    SHARPNESS: "Sharpness",
    SUBJECT_DISTANCE_RANGE: "SubjectDistanceRange",
    IMAGE_UNIQUE_ID: "ImageUniqueID",
    BODY_SERIAL_NUMBER: "BodySerialNumber",
    LENS_INFO: "LensInfo",
    LENS_MAKE: "LensMake",
    LENS_MODEL: "LensModel",
    LENS_SERIAL_NUMBER: "LensSerialNumber",
    IMAGE_EDITOR: "ImageEditor",
    CAMERA_FIRMWARE: "CameraFirmware",
    COMPOSITE_IMAGE: "CompositeImage",
    COMPOSITE_IMAGE_COUNT: "CompositeImageCount",
    SERIAL_NUMBER: "SerialNumber",
}

GPS_TAG_NAMES = {
    GPS_VERSION_ID: "GPSVersionID",
    GPS_LATITUDE_REF: "GPSLatitudeRef",
    GPS_LATITUDE: "GPSLatitude",
    GPS_LONGITUDE_REF: "GPSLongitudeRef",
    GPS_LONGITUDE: "GPSLongitude",
    GPS_ALTITUDE_REF: "GPSAltitudeRef",
    GPS_ALTITUDE: "GPSAltitude",
    GPS_TIMESTAMP: "GPSTimeStamp",
    GPS_SPEED_REF: "GPSSpeedRef",
    GPS_SPEED: "GPSSpeed",
    GPS_IMG_DIRECTION_REF: "GPSImgDirectionRef",
    GPS_IMG_DIRECTION: "GPSImgDirection",
    GPS_MAP_DATUM: "GPSMapDatum",
    GPS_DEST_LATITUDE_REF: "GPSDestLatitudeRef",
    GPS_DEST_LATITUDE: "GPSDestLatitude",
    GPS_DEST_LONGITUDE_REF: "GPSDestLongitudeRef",
    GPS_DEST_LONGITUDE: "GPSDestLongitude",
    GPS_DEST_BEARING_REF: "GPSDestBearingRef",
    GPS_DEST_BEARING: "GPSDestBearing",
    GPS_DEST_DISTANCE_REF: "GPSDestDistanceRef",
    GPS_DEST_DISTANCE: "GPSDestDistance",
    GPS_PROCESSING_METHOD: "GPSProcessingMethod",
    GPS_DATESTAMP: "GPSDateStamp",
    GPS_DIFFERENTIAL: "GPSDifferential",
}
