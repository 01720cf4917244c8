import argparse
import logging
import socket
import sys

from constants import DEFAULT_HOST, DEFAULT_PORT, FORWARD_TIMEOUT
from server import create_server_socket, serve

logger = logging.getLogger(__name__)


def parse_resolver(value):
    """
    Turn "host:port" into the (ip, port) tuple sockets want.
    The host is looked up once, at startup.
    """
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise argparse.ArgumentTypeError(f"resolver must look like host:port, got {value!r}")
    try:
        port = int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"resolver port must be a number, got {port!r}")
    if not 0 < port <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"resolver port out of range: {port}")
    try:
        ip_address = socket.gethostbyname(host)
    except OSError as e:
        raise argparse.ArgumentTypeError(f"cannot resolve resolver host {host!r}: {e}")
    return ip_address, port


def build_parser():
    parser = argparse.ArgumentParser(description="Minimal forwarding DNS server")
    parser.add_argument("--resolver", type=parse_resolver, default=None,
                        help="forward every question to this resolver (host:port)")
    parser.add_argument("--host", default=DEFAULT_HOST, help=f"address to listen on (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"UDP port to listen on (default: {DEFAULT_PORT})")
    parser.add_argument("--timeout", type=float, default=FORWARD_TIMEOUT,
                        help=f"seconds to wait for the resolver (default: {FORWARD_TIMEOUT})")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    try:
        sock = create_server_socket(args.host, args.port)
    except OSError as e:
        logger.error(f"Cannot listen on {args.host}:{args.port}: {e}")
        sys.exit(1)

    if args.resolver:
        logger.info(f"DNS server listening on {args.host}:{args.port}, forwarding to {args.resolver[0]}:{args.resolver[1]}")
    else:
        logger.info(f"DNS server listening on {args.host}:{args.port}, answering with the default address")

    with sock:
        try:
            serve(sock, args.resolver, args.timeout)
        except KeyboardInterrupt:
            logger.info("Shutting down")


if __name__ == "__main__":
    main()
