import logging
import random
import socket
import time

import dns.rdatatype

from classes import Header, Packet, Record
from constants import (
    DEFAULT_ANSWER_IP,
    DEFAULT_TTL,
    FORWARD_TIMEOUT,
    MAX_PACKET_SIZE,
    OPCODE_QUERY,
    RCODE_NOTIMP,
)
from parsers import parse_packet
from utils import packet_to_bytes

logger = logging.getLogger(__name__)


def response_header(request_header: Header) -> Header:
    """Derive the reply header from the request header.

    id, RD and OPCODE are kept as they are. QR is set, and anything that is not
    a standard query gets RCODE 4 (not implemented).
    """
    header = request_header.as_response()
    if header.opcode != OPCODE_QUERY:
        header = header.with_rcode(RCODE_NOTIMP)
    return header


def default_answers(questions):
    # one canned answer per question, bound to that question's name/type/class
    return [
        Record(question.name, question.type_, question.class_, DEFAULT_TTL, DEFAULT_ANSWER_IP)
        for question in questions
    ]


def send_query(sock, query: Packet, address, timeout=FORWARD_TIMEOUT) -> Packet:
    # send the query to the resolver and block until its reply shows up or the time runs out
    sock.sendto(packet_to_bytes(query), address)
    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout(f"no reply with id {query.header.id} within {timeout}s")
        sock.settimeout(remaining)
        data, _ = sock.recvfrom(MAX_PACKET_SIZE)
        reply = parse_packet(data)
        if reply.header.id == query.header.id:
            return reply
        # a late reply to an earlier question on this socket
        logger.debug(f"Skipping reply id {reply.header.id} while waiting for id {query.header.id}")


def forward_questions(request: Packet, resolver_address, timeout=FORWARD_TIMEOUT):
    """
    Forward every question of the request to the resolver, one query per question.
    A question whose exchange fails just contributes no answers.
    """
    answers = []
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        for question in request.questions:
            # the resolver only takes one question per message, and each one gets its own id
            header = request.header.with_id(random.randint(0, 0xFFFF))
            query = Packet(header, [question])
            logger.debug(f"Forwarding {question.name} ({dns.rdatatype.to_text(question.type_)}) "
                         f"to {resolver_address[0]}:{resolver_address[1]} with id {header.id}")
            try:
                reply = send_query(sock, query, resolver_address, timeout)
            except (OSError, ValueError) as e:
                logger.warning(f"No answer from resolver for {question.name}: {e}")
                continue

            if len(reply.answers) != 1:
                logger.info(f"Resolver returned {len(reply.answers)} answer(s) for {question.name}")
            answers.extend(reply.answers)
    return answers


def handle_request(request: Packet, resolver_address=None, timeout=FORWARD_TIMEOUT) -> Packet:
    header = response_header(request.header)

    if resolver_address is None:
        answers = default_answers(request.questions)
    else:
        try:
            answers = forward_questions(request, resolver_address, timeout)
        except OSError as e:
            logger.warning(f"Could not open a socket to forward to the resolver: {e}")
            answers = []
        if not answers:
            # nothing came back for any question, so answer the whole set ourselves
            logger.info("Resolver gave no answers, falling back to the default answer")
            answers = default_answers(request.questions)

    return Packet(header, request.questions, answers)
