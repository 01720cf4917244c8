from dataclasses import dataclass, field, replace

from constants import (
    AA_MASK,
    OPCODE_MASK,
    OPCODE_SHIFT,
    QR_MASK,
    RA_MASK,
    RCODE_MASK,
    RD_MASK,
    RD_SHIFT,
    TC_MASK,
    Z_MASK,
    Z_SHIFT,
)


@dataclass(frozen=True)
class Header:
    # The order of the fields is the order on the wire (see header_to_bytes)
    id: int
    flags: int
    num_questions: int = 0
    num_answers: int = 0
    num_authorities: int = 0
    num_additional: int = 0

    @property
    def is_response(self):
        return bool(self.flags & QR_MASK)

    @property
    def opcode(self):
        return (self.flags & OPCODE_MASK) >> OPCODE_SHIFT

    @property
    def authoritative(self):
        return bool(self.flags & AA_MASK)

    @property
    def truncated(self):
        return bool(self.flags & TC_MASK)

    @property
    def recursion_desired(self):
        return (self.flags & RD_MASK) >> RD_SHIFT

    @property
    def recursion_available(self):
        return bool(self.flags & RA_MASK)

    @property
    def z(self):
        return (self.flags & Z_MASK) >> Z_SHIFT

    @property
    def rcode(self):
        return self.flags & RCODE_MASK

    def _with_field(self, name, value, mask, shift):
        # mask >> shift is the largest value the field can hold
        limit = mask >> shift
        if not 0 <= value <= limit:
            raise ValueError(f"{name} must be between 0 and {limit}, got {value}")
        return replace(self, flags=(self.flags & ~mask) | (value << shift))

    def as_response(self):
        """Return a copy of this header with the QR bit set."""
        return replace(self, flags=self.flags | QR_MASK)

    def with_opcode(self, opcode):
        return self._with_field("OPCODE", opcode, OPCODE_MASK, OPCODE_SHIFT)

    def with_rcode(self, rcode):
        return self._with_field("RCODE", rcode, RCODE_MASK, 0)

    def with_recursion_desired(self, rd):
        return self._with_field("RD", rd, RD_MASK, RD_SHIFT)

    def with_id(self, id):
        return replace(self, id=id)


@dataclass
class Question:
    name: str    # example.com
    type_: int   # A
    class_: int  # IN, almost always


@dataclass
class Record:
    name: str    # domain name
    type_: int   # A (anything else goes through untouched)
    class_: int
    ttl: int     # signed 32 bits on the wire, nobody here enforces it
    data: str    # dotted address, e.g. "8.8.8.8"


@dataclass
class Packet:
    header: Header
    questions: list[Question]
    answers: list[Record] = field(default_factory=list)

    def __post_init__(self):
        # The lists are the truth; the counts in whatever header we were given are not.
        # Authority and additional sections are never written, so those counts are zero.
        self.header = replace(
            self.header,
            num_questions=len(self.questions),
            num_answers=len(self.answers),
            num_authorities=0,
            num_additional=0,
        )
