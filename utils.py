import dataclasses
import struct

from classes import Header, Packet, Question, Record
from constants import POINTER_MASK


def header_to_bytes(header: Header) -> bytes:
    # This function converts the header to a byte string
    fields = dataclasses.astuple(header)

    # struct.pack converts the fields to bytes according to the format string (here !HHHHHH)
    return struct.pack('!HHHHHH', *fields)


def question_to_bytes(question: Question) -> bytes:
    return encode_dns_name(question.name) + struct.pack('!HH', question.type_, question.class_)


def record_to_bytes(record: Record) -> bytes:
    # rdlength is whatever the encoded data turns out to be, it's never stored
    data = ip_to_bytes(record.data)
    # HHiH means 2byte int, 2byte int, signed 4byte int, 2byte int
    fixed = struct.pack('!HHiH', record.type_, record.class_, record.ttl, len(data))
    return encode_dns_name(record.name) + fixed + data


def packet_to_bytes(packet: Packet) -> bytes:
    # header, then every question, then every answer, all in list order
    encoded = header_to_bytes(packet.header)
    encoded += b''.join(question_to_bytes(question) for question in packet.questions)
    encoded += b''.join(record_to_bytes(record) for record in packet.answers)
    return encoded


def encode_dns_name(domain_name):
    # check if the input is a string or bytes object
    if isinstance(domain_name, bytes):
        domain_name = domain_name.decode("ascii")
    elif not isinstance(domain_name, str):
        raise ValueError("Input must be a string or bytes object")

    # google.com ends up as b'\x06google\x03com\x00', because google is 6 characters long, and com is 3 characters long.
    # The root name ("") is just the terminating b'\x00'
    encoded = b''
    if domain_name:
        for part in domain_name.split("."):
            label = part.encode("utf-8")
            encoded += bytes([len(label)]) + label
    return encoded + b'\x00'


def read_exactly(reader, size):
    """Read size bytes from reader, or fail if the packet ends first."""
    data = reader.read(size)
    if len(data) != size:
        raise ValueError(f"Truncated packet: wanted {size} bytes at offset {reader.tell() - len(data)}, got {len(data)}")
    return data


def decode_name(reader) -> str:
    start = reader.tell()
    parts = []
    while (length := read_exactly(reader, 1)[0]) != 0:
        # check the first two bits: 11 means the rest of the name is compressed
        if length & POINTER_MASK == POINTER_MASK:
            parts.append(decode_compressed_name(length, reader, start))
            # a pointer always ends the name, the pointed-to labels bring their own terminator
            break
        elif length & POINTER_MASK:
            # 01 and 10 are reserved label types
            raise ValueError(f"Unsupported label type {length >> 6:02b} at offset {reader.tell() - 1}")
        else:
            # normal label, octets that are not UTF-8 come out as U+FFFD
            parts.append(read_exactly(reader, length).decode("utf-8", errors="replace"))
    return ".".join(part for part in parts if part)


def decode_compressed_name(length, reader, name_start) -> str:
    # the length is in the form of 11xxxxxx, where x is the start of the pointer
    # so, we take the last 6 bits of the length and add them to the next byte to get the offset
    pointer_bytes = bytes([length & 0b0011_1111]) + read_exactly(reader, 1)
    pointer = struct.unpack("!H", pointer_bytes)[0]

    # every hop must land before the name it came from, so a chain of pointers can't loop
    if pointer >= name_start:
        raise ValueError(f"Compression pointer to offset {pointer} does not point before offset {name_start}")

    # save the position right after the pointer
    current_pos = reader.tell()
    reader.seek(pointer)
    result = decode_name(reader)
    # go back to where we were, no matter how many pointers the inner decode followed
    reader.seek(current_pos)
    return result


def ip_to_string(ip: bytes) -> str:
    return ".".join([str(byte) for byte in ip])


def ip_to_bytes(ip: str) -> bytes:
    # "8.8.8.8" -> b'\x08\x08\x08\x08', each octet must fit in a byte; "" is an empty payload
    if not ip:
        return b""
    return bytes(int(octet) for octet in ip.split("."))
