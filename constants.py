import dns.opcode
import dns.rcode
import dns.rdataclass
import dns.rdatatype

# Record types and classes we know how to answer
TYPE_A = dns.rdatatype.A
CLASS_IN = dns.rdataclass.IN

OPCODE_QUERY = dns.opcode.QUERY
RCODE_NOERROR = dns.rcode.NOERROR
RCODE_NOTIMP = dns.rcode.NOTIMP

# Header flag layout: QR | OPCODE(4) | AA | TC | RD | RA | Z(3) | RCODE(4)
QR_MASK = 0x8000
OPCODE_SHIFT = 11
OPCODE_MASK = 0b1111 << OPCODE_SHIFT
AA_MASK = 0x0400
TC_MASK = 0x0200
RD_SHIFT = 8
RD_MASK = 1 << RD_SHIFT
RA_MASK = 0x0080
Z_SHIFT = 4
Z_MASK = 0b111 << Z_SHIFT
RCODE_MASK = 0b1111

HEADER_SIZE = 12
POINTER_MASK = 0b1100_0000

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2053
MAX_PACKET_SIZE = 512

# Answer handed out when there is no resolver, or the resolver gave us nothing
DEFAULT_ANSWER_IP = "8.8.8.8"
DEFAULT_TTL = 1800

FORWARD_TIMEOUT = 2.0
