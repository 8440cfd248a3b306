from __future__ import annotations

import itertools
import logging

import pytest
from asn1crypto import x509

from conftest import CertificateFactory, common_names
from kv_sign_plugin import (
    DuplicateCertificateError,
    EmptyBundleError,
    ErrorKind,
    IncompleteBundleError,
    MultipleLeafCandidatesError,
    OrphanedCertificatesError,
    build_certificate_chain,
    dump_chain_der,
)
from kv_sign_plugin.x509_ops import dump_certificate_pem


@pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
def test_build_orders_chain_from_any_input_order(
    three_level_chain: list[x509.Certificate], order: tuple[int, ...]
) -> None:
    bundle = [three_level_chain[index].dump() for index in order]

    chain = build_certificate_chain(bundle)

    assert common_names(chain) == ["A", "B", "C"]
    assert dump_chain_der(chain) == [cert.dump() for cert in three_level_chain]


def test_build_accepts_pem_and_parsed_certificates(
    three_level_chain: list[x509.Certificate],
) -> None:
    leaf, intermediate, root = three_level_chain
    chain = build_certificate_chain([root, dump_certificate_pem(leaf), intermediate.dump()])
    assert common_names(chain) == ["A", "B", "C"]


def test_single_self_signed_certificate_is_returned(
    make_certificate: CertificateFactory,
) -> None:
    root = make_certificate("Root")

    chain = build_certificate_chain([root.dump()])

    assert len(chain) == 1
    assert chain[0].dump() == root.dump()


def test_single_non_self_signed_certificate_is_incomplete(
    make_certificate: CertificateFactory,
) -> None:
    with pytest.raises(IncompleteBundleError, match="ca_certs") as excinfo:
        build_certificate_chain([make_certificate("Leaf", "Missing CA").dump()])
    assert excinfo.value.kind is ErrorKind.INCOMPLETE_BUNDLE


def test_empty_bundle_fails() -> None:
    with pytest.raises(EmptyBundleError) as excinfo:
        build_certificate_chain([])
    assert excinfo.value.kind is ErrorKind.EMPTY_BUNDLE


def test_duplicate_subject_fails(make_certificate: CertificateFactory) -> None:
    bundle = [
        make_certificate("A", "B"),
        make_certificate("B", "C"),
        make_certificate("B", "C"),
        make_certificate("C"),
    ]
    with pytest.raises(DuplicateCertificateError):
        build_certificate_chain(bundle)


def test_two_leaf_candidates_fail(make_certificate: CertificateFactory) -> None:
    bundle = [
        make_certificate("Leaf 1", "Root"),
        make_certificate("Leaf 2", "Root"),
        make_certificate("Root"),
    ]
    with pytest.raises(MultipleLeafCandidatesError):
        build_certificate_chain(bundle)


def test_two_unrelated_leaves_fail(make_certificate: CertificateFactory) -> None:
    bundle = [make_certificate("X", "Y"), make_certificate("P", "Q")]
    with pytest.raises(MultipleLeafCandidatesError):
        build_certificate_chain(bundle)


def test_no_leaf_candidate_fails(make_certificate: CertificateFactory) -> None:
    bundle = [make_certificate("A", "B"), make_certificate("B", "A")]
    with pytest.raises(MultipleLeafCandidatesError):
        build_certificate_chain(bundle)


def test_missing_intermediate_is_incomplete(make_certificate: CertificateFactory) -> None:
    bundle = [make_certificate("A", "B"), make_certificate("B", "C")]
    with pytest.raises(IncompleteBundleError, match="issuer of"):
        build_certificate_chain(bundle)


def test_unreachable_certificate_is_orphaned(
    three_level_chain: list[x509.Certificate], make_certificate: CertificateFactory
) -> None:
    # A self-signed extra names itself as issuer, so it is not a leaf candidate,
    # but the walk from A never reaches it.
    bundle = [*three_level_chain, make_certificate("Unrelated Root")]
    with pytest.raises(OrphanedCertificatesError) as excinfo:
        build_certificate_chain(bundle)
    assert excinfo.value.kind is ErrorKind.ORPHANED_CERTIFICATES


def test_issuer_cycle_is_incomplete(make_certificate: CertificateFactory) -> None:
    bundle = [
        make_certificate("Leaf", "A"),
        make_certificate("A", "B"),
        make_certificate("B", "A"),
    ]
    with pytest.raises(IncompleteBundleError, match="loops back"):
        build_certificate_chain(bundle)


@pytest.mark.parametrize(
    ("issuers", "message"),
    [
        ([], "Certificate bundle is empty"),
        ([("A", "B")], "Single certificate bundle is not self-signed"),
        ([("A", "B"), ("B", "C")], "Issuer missing from certificate bundle"),
        ([("Leaf", "A"), ("A", "B"), ("B", "A")], "Issuer cycle in certificate bundle"),
    ],
)
def test_failures_are_logged_before_raising(
    make_certificate: CertificateFactory,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
    issuers: list[tuple[str, str]],
    message: str,
) -> None:
    # configure_logging detaches the package namespace from the root logger.
    monkeypatch.setattr(logging.getLogger("kv_sign_plugin"), "propagate", True)
    caplog.set_level(logging.WARNING, logger="kv_sign_plugin.certificate_chain")
    bundle = [make_certificate(subject, issuer) for subject, issuer in issuers]

    with pytest.raises(IncompleteBundleError if bundle else EmptyBundleError):
        build_certificate_chain(bundle)

    assert [record.levelno for record in caplog.records] == [logging.WARNING]
    assert caplog.records[0].getMessage().startswith(message)
