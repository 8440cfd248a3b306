from __future__ import annotations

import argparse
import sys
from pathlib import Path

if __package__ in (None, ""):
    repo_src = Path(__file__).resolve().parents[1] / "src"
    if str(repo_src) not in sys.path:
        sys.path.insert(0, str(repo_src))

from kv_sign_plugin import (
    KeyReference,
    PluginError,
    build_certificate_chain,
    configure_logging,
    dump_chain_pem,
    load_ca_certificates,
    load_pem_bundle,
    re_encode_pkcs12,
)


class _HelpFormatter(
    argparse.RawTextHelpFormatter,
    argparse.ArgumentDefaultsHelpFormatter,
):
    """Keep multiline examples readable and include defaults."""


CLI_HELP_EPILOG = """Examples:
  # Order a certificate bundle returned by the vault (PEM or DER files)
  python3 examples/chain_cli.py chain leaf.der bundle.pem --out chain.pem

  # Complete a leaf-only bundle with the ca_certs plugin config file
  python3 examples/chain_cli.py chain leaf.der --ca-certs ca.pem

  # Strip MAC and keys from a PKCS#12 certificate secret
  python3 examples/chain_cli.py pfx secret.pfx --out certs.pfx

  # Check a key identifier
  python3 examples/chain_cli.py key-id https://myvault.vault.azure.net/keys/my-key/123
"""


def _read_binary_file(path: str) -> bytes:
    source = Path(path)
    if not source.is_file():
        raise ValueError(f"File does not exist: {source}")
    return source.read_bytes()


def _read_certificates(path: str) -> list[bytes]:
    payload = _read_binary_file(path)
    if b"-----BEGIN" in payload:
        return [certificate.dump() for certificate in load_pem_bundle(payload)]
    return [payload]


def _write_binary_output(payload: bytes, out_path: str | None, label: str) -> None:
    if out_path is None:
        sys.stdout.buffer.write(payload)
        return
    target = Path(out_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(payload)
    print(f"Wrote {label} to: {target}")


def _cmd_chain(args: argparse.Namespace) -> None:
    bundle: list[object] = []
    for path in args.certificates:
        bundle.extend(_read_certificates(path))
    if args.ca_certs:
        bundle.extend(load_ca_certificates(args.ca_certs))
    chain = build_certificate_chain(bundle)
    _write_binary_output(dump_chain_pem(chain), args.out, "certificate chain")


def _cmd_pfx(args: argparse.Namespace) -> None:
    result = re_encode_pkcs12(_read_binary_file(args.pfx_file))
    _write_binary_output(result, args.out, "PKCS#12")


def _cmd_key_id(args: argparse.Namespace) -> None:
    reference = KeyReference.from_key_id(args.key_id)
    print(f"vault_url={reference.vault_url}")
    print(f"name={reference.name}")
    print(f"version={reference.version}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Certificate chain and PKCS#12 helpers for the key vault signing plugin.",
        formatter_class=_HelpFormatter,
        epilog=CLI_HELP_EPILOG,
    )
    parser.add_argument("--log-file", help="Rotating log file path.")
    parser.add_argument("--log-level", default="INFO", help="Log level.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    chain = subparsers.add_parser(
        "chain", help="Order certificates leaf first.", formatter_class=_HelpFormatter
    )
    chain.add_argument("certificates", nargs="+", help="PEM bundle or DER certificate files.")
    chain.add_argument("--ca-certs", help="PEM file with additional CA certificates.")
    chain.add_argument("--out", help="Output PEM file (stdout when omitted).")
    chain.set_defaults(handler=_cmd_chain)

    pfx = subparsers.add_parser(
        "pfx", help="Re-encode a PKCS#12 file without MAC and keys.", formatter_class=_HelpFormatter
    )
    pfx.add_argument("pfx_file", help="PKCS#12 file protected with the null password.")
    pfx.add_argument("--out", help="Output file (stdout when omitted).")
    pfx.set_defaults(handler=_cmd_pfx)

    key_id = subparsers.add_parser(
        "key-id", help="Parse a key identifier.", formatter_class=_HelpFormatter
    )
    key_id.add_argument("key_id", help="https://<vault>/keys/<name>/<version>")
    key_id.set_defaults(handler=_cmd_key_id)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(log_file=args.log_file, level=args.log_level)
    try:
        args.handler(args)
    except (PluginError, ValueError) as exc:
        kind = exc.kind.value if isinstance(exc, PluginError) else "invalid_input"
        print(f"Error [{kind}]: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
