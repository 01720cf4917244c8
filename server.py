import logging
import socket
import struct

import dns.rdatatype

from constants import DEFAULT_HOST, DEFAULT_PORT, FORWARD_TIMEOUT, MAX_PACKET_SIZE
from handler import handle_request
from parsers import parse_packet
from utils import packet_to_bytes

logger = logging.getLogger(__name__)


def create_server_socket(host=DEFAULT_HOST, port=DEFAULT_PORT):
    # `socket.AF_INET` means IPv4, socket.SOCK_DGRAM means that we're using UDP
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


def handle_datagram(data: bytes, resolver_address=None, timeout=FORWARD_TIMEOUT) -> bytes:
    """Decode one query, work out the reply and return it encoded."""
    request = parse_packet(data)
    for question in request.questions:
        logger.info(f"Query id={request.header.id} opcode={request.header.opcode} "
                    f"{question.name} {dns.rdatatype.to_text(question.type_)}")

    response = handle_request(request, resolver_address, timeout)
    encoded = packet_to_bytes(response)
    if len(encoded) > MAX_PACKET_SIZE:
        logger.warning(f"Response to id={request.header.id} is {len(encoded)} bytes, over the {MAX_PACKET_SIZE} byte UDP limit")
    return encoded


def serve(sock, resolver_address=None, timeout=FORWARD_TIMEOUT):
    """
    Answer queries on sock forever, one at a time.
    A datagram that can't be decoded or answered is logged and dropped.
    """
    while True:
        try:
            data, source = sock.recvfrom(MAX_PACKET_SIZE)
        except ConnectionError as e:
            # an ICMP error left over from an earlier sendto, the socket itself is fine
            logger.warning(f"Receive failed: {e}")
            continue

        try:
            response = handle_datagram(data, resolver_address, timeout)
            sock.sendto(response, source)
        except (ValueError, struct.error, OSError) as e:
            logger.error(f"Dropping datagram from {source[0]}:{source[1]}: {e}")
