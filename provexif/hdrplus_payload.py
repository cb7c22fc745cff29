# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Google HDR+ MakerNote payload decoder

The decompressed HDR+ MakerNote is a protocol buffer. The message types
are built at import time from a FileDescriptorProto so no generated
code has to be shipped. Unknown fields are discarded. When the payload
is truncated, every complete top-level field before the cut is still
decoded, and a cut inside a nested message keeps that message's
complete fields too.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import DecodeError, Message

from provexif.evidence import FieldValue

PACKAGE = 'provexif.hdrplus'
ROOT_MESSAGE = 'GoogleHDRPlusMakerNote'

_F = descriptor_pb2.FieldDescriptorProto

# message name -> [(field name, number, type, message type name)]
HDRPLUS_SCHEMA = {
    'ImageInfo': [
        ('image_name', 1, _F.TYPE_BYTES, None),
        ('image_data', 2, _F.TYPE_BYTES, None),
    ],
    'FrameCountInfo': [
        ('frame_count', 3, _F.TYPE_UINT32, None),
    ],
    'ExposureTimeInfo': [
        ('exposure_time_min', 1, _F.TYPE_FLOAT, None),
        ('exposure_time_max', 2, _F.TYPE_FLOAT, None),
    ],
    'IsoInfo': [
        ('iso_min', 1, _F.TYPE_FLOAT, None),
        ('iso_max', 2, _F.TYPE_FLOAT, None),
    ],
    'DeviceInfo': [
        ('device_make', 1, _F.TYPE_BYTES, None),
        ('device_model', 2, _F.TYPE_BYTES, None),
        ('device_codename', 3, _F.TYPE_BYTES, None),
        ('device_hardware_revision', 4, _F.TYPE_BYTES, None),
        ('hdrp_software', 6, _F.TYPE_BYTES, None),
        ('android_release', 7, _F.TYPE_BYTES, None),
        ('software_date', 8, _F.TYPE_UINT64, None),
        ('application', 9, _F.TYPE_BYTES, None),
        ('app_version', 10, _F.TYPE_BYTES, None),
        ('exposure_time_info', 12, _F.TYPE_MESSAGE, 'ExposureTimeInfo'),
        ('iso_info', 13, _F.TYPE_MESSAGE, 'IsoInfo'),
        ('max_analog_iso', 14, _F.TYPE_FLOAT, None),
    ],
    ROOT_MESSAGE: [
        ('image_info', 1, _F.TYPE_MESSAGE, 'ImageInfo'),
        ('time_log_text', 2, _F.TYPE_BYTES, None),
        ('summary_text', 3, _F.TYPE_BYTES, None),
        ('frame_count', 9, _F.TYPE_MESSAGE, 'FrameCountInfo'),
        ('device_info', 12, _F.TYPE_MESSAGE, 'DeviceInfo'),
    ],
}

# protobuf wire types
WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_FIXED32 = 5


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Describe the HDR+ MakerNote messages as a proto2 file."""
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = 'provexif/hdrplus_makernote.proto'
    file_proto.package = PACKAGE
    file_proto.syntax = 'proto2'
    for message_name, message_fields in HDRPLUS_SCHEMA.items():
        message_proto = file_proto.message_type.add()
        message_proto.name = message_name
        for name, number, field_type, type_name in message_fields:
            field_proto = message_proto.field.add()
            field_proto.name = name
            field_proto.number = number
            field_proto.type = field_type
            field_proto.label = _F.LABEL_OPTIONAL
            if type_name:
                field_proto.type_name = f'.{PACKAGE}.{type_name}'
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(build_file_descriptor().SerializeToString())

GoogleHDRPlusMakerNote = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f'{PACKAGE}.{ROOT_MESSAGE}'))


@dataclass
class PayloadDecodeResult:
    """
    Decoded HDR+ payload.

    error is set when the payload did not parse cleanly; message then
    holds whatever fields could be recovered.
    """
    message: Message
    error: Optional[str] = None
    recovered_fields: int = 0


def _read_varint(data: bytes, pos: int) -> Tuple[Optional[int], int]:
    result = 0
    shift = 0
    while pos < len(data):
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7
        if shift >= 64:
            return None, pos
    return None, pos


def scan_fields(data: bytes) -> Tuple[List[Tuple[int, int, int, int]], Optional[Tuple[int, int]]]:
    """
    Split serialized protobuf bytes into top-level fields.

    Returns:
        (complete fields as (number, wire type, start, end),
         truncated length-delimited field as (number, value start) or None)

    Scanning stops at the first field that is cut short or uses a wire
    type this schema never produces (groups).
    """
    fields: List[Tuple[int, int, int, int]] = []
    pos = 0
    while pos < len(data):
        start = pos
        key, pos = _read_varint(data, pos)
        if key is None:
            break
        number, wire_type = key >> 3, key & 0x07
        if number == 0:
            break
        if wire_type == WIRE_VARINT:
            value, pos = _read_varint(data, pos)
            if value is None:
                break
        elif wire_type == WIRE_FIXED64:
            pos += 8
        elif wire_type == WIRE_FIXED32:
            pos += 4
        elif wire_type == WIRE_LENGTH_DELIMITED:
            length, pos = _read_varint(data, pos)
            if length is None:
                break
            if pos + length > len(data):
                return fields, (number, pos)
            pos += length
        else:
            break
        if pos > len(data):
            break
        fields.append((number, wire_type, start, pos))
    return fields, None


def tolerant_merge(message: Message, data: bytes) -> int:
    """
    Merge every complete field of data into message.

    Complete fields are merged one at a time, so one bad field does not
    lose the others. If the data ends inside a nested message, the
    complete fields of that nested message are merged as well.

    Returns:
        Number of fields merged
    """
    merged = 0
    complete_fields, truncated = scan_fields(data)
    for _number, _wire_type, start, end in complete_fields:
        try:
            message.MergeFromString(data[start:end])
        except DecodeError:
            continue
        merged += 1

    if truncated is not None:
        number, value_start = truncated
        field = message.DESCRIPTOR.fields_by_number.get(number)
        if field is not None and field.type == FieldDescriptor.TYPE_MESSAGE:
            nested = message_factory.GetMessageClass(field.message_type)()
            if tolerant_merge(nested, data[value_start:]):
                body = nested.SerializeToString()
                key = _encode_varint((number << 3) | WIRE_LENGTH_DELIMITED)
                message.MergeFromString(key + _encode_varint(len(body)) + body)
                merged += 1
    return merged


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_hdrplus_payload(data: bytes) -> PayloadDecodeResult:
    """
    Decode a decompressed HDR+ MakerNote.

    Unknown fields are discarded. A parse error does not raise; the
    recovered fields are returned with the error message.
    """
    message = GoogleHDRPlusMakerNote()
    try:
        message.ParseFromString(data)
        message.DiscardUnknownFields()
        return PayloadDecodeResult(message, None, len(message.ListFields()))
    except DecodeError as e:
        error = str(e) or 'truncated or corrupted payload'

    message.Clear()
    recovered = tolerant_merge(message, data)
    message.DiscardUnknownFields()
    return PayloadDecodeResult(message, error, recovered)


def _text(value: bytes) -> str:
    return value.decode('utf-8', errors='replace')


def project_fields(message: Message) -> Dict[str, FieldValue]:
    """
    Project a decoded HDR+ message into MakerNote fields.

    Only non-empty, non-zero values are included. Nested messages become
    GROUP values, and a group with nothing in it is left out.
    """
    parsed: Dict[str, FieldValue] = {}

    if message.HasField('image_info'):
        info = message.image_info
        image: Dict[str, FieldValue] = {}
        if info.image_name:
            image['imageName'] = FieldValue.string(_text(info.image_name))
        if info.image_data:
            image['imageDataSize'] = FieldValue.integer(len(info.image_data))
        if image:
            parsed['imageInfo'] = FieldValue.group(image)

    if message.time_log_text:
        parsed['timeLogText'] = FieldValue.string(_text(message.time_log_text))
    if message.summary_text:
        parsed['summaryText'] = FieldValue.string(_text(message.summary_text))

    if message.HasField('frame_count'):
        parsed['frameCount'] = FieldValue.integer(message.frame_count.frame_count)

    if message.HasField('device_info'):
        device = _project_device_info(message.device_info)
        if device:
            parsed['deviceInfo'] = FieldValue.group(device)

    return parsed


# (field name, output key)
_DEVICE_TEXT_FIELDS = (
    ('device_make', 'make'),
    ('device_model', 'model'),
    ('device_codename', 'codename'),
    ('device_hardware_revision', 'hardwareRevision'),
    ('hdrp_software', 'hdrpSoftware'),
    ('android_release', 'androidRelease'),
)


def _project_device_info(info: Message) -> Dict[str, FieldValue]:
    device: Dict[str, FieldValue] = {}
    for name, key in _DEVICE_TEXT_FIELDS:
        value = getattr(info, name)
        if value:
            device[key] = FieldValue.string(_text(value))
    if info.software_date:
        device['softwareDate'] = FieldValue.integer(info.software_date)
    if info.application:
        device['application'] = FieldValue.string(_text(info.application))
    if info.app_version:
        device['appVersion'] = FieldValue.string(_text(info.app_version))

    if info.HasField('exposure_time_info'):
        exposure = info.exposure_time_info
        if exposure.exposure_time_min:
            device['exposureTimeMin'] = FieldValue.float_(exposure.exposure_time_min)
        if exposure.exposure_time_max:
            device['exposureTimeMax'] = FieldValue.float_(exposure.exposure_time_max)

    if info.HasField('iso_info'):
        iso = info.iso_info
        if iso.iso_min:
            device['isoMin'] = FieldValue.float_(iso.iso_min)
        if iso.iso_max:
            device['isoMax'] = FieldValue.float_(iso.iso_max)

    if info.max_analog_iso:
        device['maxAnalogIso'] = FieldValue.float_(info.max_analog_iso)
    return device
