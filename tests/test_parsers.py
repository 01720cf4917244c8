import struct
import unittest
from io import BytesIO

import dns.flags
import dns.message
import dns.rrset

from classes import Header, Packet, Question, Record
from constants import CLASS_IN, TYPE_A
from parsers import parse_header, parse_packet, parse_question, parse_record
from utils import header_to_bytes, packet_to_bytes, record_to_bytes


class TestParseHeader(unittest.TestCase):
    def test_header_round_trip(self):
        for header in [
            Header(0, 0, 0, 0, 0, 0),
            Header(0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF, 0xFFFF),
            Header(1234, 0x8180, 1, 2, 3, 4),
            Header(42, 0, 1).with_opcode(15).with_rcode(4).as_response(),
        ]:
            with self.subTest(header=header):
                self.assertEqual(parse_header(BytesIO(header_to_bytes(header))), header)

    def test_short_header(self):
        with self.assertRaises(ValueError):
            parse_header(BytesIO(b"\x00" * 11))


class TestParseRecords(unittest.TestCase):
    def test_question(self):
        reader = BytesIO(b"\x0ccodecrafters\x02io\x00\x00\x01\x00\x01")

        self.assertEqual(parse_question(reader), Question("codecrafters.io", 1, 1))

    def test_record(self):
        data = b"\x07example\x03com\x00" + struct.pack("!HHiH", 1, 1, 3600, 4) + bytes([192, 168, 1, 1])

        record = parse_record(BytesIO(data))

        self.assertEqual(record, Record("example.com", 1, 1, 3600, "192.168.1.1"))

    def test_record_reads_exactly_rdlength_bytes(self):
        data = b"\x00" + struct.pack("!HHiH", 1, 1, 60, 6) + bytes([1, 2, 3, 4, 5, 6]) + b"\xff"
        reader = BytesIO(data)

        record = parse_record(reader)

        self.assertEqual(record.data, "1.2.3.4.5.6")
        self.assertEqual(reader.tell(), len(data) - 1)

    def test_truncated_record(self):
        data = b"\x00" + struct.pack("!HHiH", 1, 1, 60, 4) + bytes([1, 2])

        with self.assertRaises(ValueError):
            parse_record(BytesIO(data))


class TestParsePacket(unittest.TestCase):
    def test_query_built_by_dnspython(self):
        query = dns.message.make_query("example.com", "A")

        packet = parse_packet(query.to_wire())

        self.assertEqual(packet.header.id, query.id)
        self.assertEqual(packet.header.recursion_desired, 1)
        self.assertFalse(packet.header.is_response)
        self.assertEqual(packet.questions, [Question("example.com", TYPE_A, CLASS_IN)])
        self.assertEqual(packet.answers, [])

    def test_compressed_response_built_by_dnspython(self):
        query = dns.message.make_query("www.example.com", "A")
        response = dns.message.make_response(query)
        response.answer.append(dns.rrset.from_text("www.example.com.", 300, "IN", "A", "93.184.216.34"))
        wire = response.to_wire()
        # dnspython points the answer name back at the question
        self.assertIn(b"\xc0\x0c", wire)

        packet = parse_packet(wire)

        self.assertTrue(packet.header.is_response)
        self.assertEqual(packet.answers, [Record("www.example.com", TYPE_A, CLASS_IN, 300, "93.184.216.34")])

    def test_round_trip_through_dnspython(self):
        header = Header(id=4321, flags=0x0100)
        packet = Packet(header, [Question("example.com", TYPE_A, CLASS_IN)],
                        [Record("example.com", TYPE_A, CLASS_IN, 1800, "8.8.8.8")])

        message = dns.message.from_wire(packet_to_bytes(packet))

        self.assertEqual(message.id, 4321)
        self.assertTrue(message.flags & dns.flags.RD)
        self.assertEqual(str(message.question[0].name), "example.com.")
        self.assertEqual(message.answer[0].ttl, 1800)
        self.assertEqual(message.answer[0][0].address, "8.8.8.8")

    def test_answer_count_larger_than_packet(self):
        wire = header_to_bytes(Header(1, 0, 0, 1))

        with self.assertRaises(ValueError):
            parse_packet(wire)

    def test_trailing_sections_are_ignored(self):
        query = dns.message.make_query("example.com", "A", use_edns=0)

        packet = parse_packet(query.to_wire())

        self.assertEqual(len(packet.questions), 1)
        self.assertEqual(packet.header.num_additional, 0)


class TestEmptyRdata(unittest.TestCase):
    def test_record_with_no_rdata_survives_a_round_trip(self):
        # a NULL record with nothing in it
        data = b"\x07example\x03com\x00" + struct.pack("!HHiH", 10, 1, 60, 0)

        record = parse_record(BytesIO(data))

        self.assertEqual(record.data, "")
        self.assertEqual(record_to_bytes(record), data)
