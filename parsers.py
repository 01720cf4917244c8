import struct
from io import BytesIO

from classes import Header, Packet, Question, Record
from constants import HEADER_SIZE
from utils import decode_name, ip_to_string, read_exactly


def parse_header(reader):
    # !HHHHHH means that we're expecting 6 unsigned shorts (2 bytes each)
    # We read 12 bytes because we have 6*2 bytes in total
    items = struct.unpack('!HHHHHH', read_exactly(reader, HEADER_SIZE))
    return Header(*items)


def parse_question(reader):
    name = decode_name(reader)
    data = read_exactly(reader, 4)
    type_, class_ = struct.unpack('!HH', data)
    return Question(name, type_, class_)


def parse_record(reader):
    name = decode_name(reader)
    data = read_exactly(reader, 10)
    # HHiH means 2byte int, 2byte int, signed 4byte int, 2byte int
    type_, class_, ttl, data_length = struct.unpack('!HHiH', data)
    # whatever the type, the payload is read as raw octets
    data = ip_to_string(read_exactly(reader, data_length))
    return Record(name, type_, class_, ttl, data)


def parse_packet(data):
    reader = BytesIO(data)
    # the header's counts say how many of each section follow
    header = parse_header(reader)
    questions = [parse_question(reader) for _ in range(header.num_questions)]
    answers = [parse_record(reader) for _ in range(header.num_answers)]
    # authority and additional sections are not used by anything here

    return Packet(header, questions, answers)
