"""Artifact digest manifest, export, and verification helpers."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import cbor2

MismatchReason = Literal["missing_actual", "unexpected_actual", "digest_mismatch"]

_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True, slots=True)
class ArtifactMismatch:
    alias: str
    reason: MismatchReason
    expected: str | None
    actual: str | None
    hint: str


@dataclass(frozen=True, slots=True)
class VerificationResult:
    ok: bool
    mismatches: tuple[ArtifactMismatch, ...] = ()


@dataclass(frozen=True, slots=True)
class ArtifactManifest:
    """SHA-256 digests of packaged function archives, keyed by function alias."""

    digests: dict[str, str] = field(default_factory=dict)
    archives: dict[str, Path] = field(default_factory=dict, compare=False)
    schema_version: int = 1

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def verify(self, expected: dict[str, str]) -> VerificationResult:
        """Compare against previously recorded digests, e.g. to reuse cached deployments."""
        mismatches: list[ArtifactMismatch] = []
        for alias, expected_digest in sorted(expected.items()):
            actual_digest = self.digests.get(alias)
            if actual_digest is None:
                mismatches.append(
                    ArtifactMismatch(
                        alias=alias,
                        reason="missing_actual",
                        expected=expected_digest,
                        actual=None,
                        hint="No archive was packaged for this function.",
                    ),
                )
            elif actual_digest != expected_digest:
                mismatches.append(
                    ArtifactMismatch(
                        alias=alias,
                        reason="digest_mismatch",
                        expected=expected_digest,
                        actual=actual_digest,
                        hint="Archive content changed; redeploy this function.",
                    ),
                )

        for alias, actual_digest in sorted(self.digests.items()):
            if alias in expected:
                continue
            mismatches.append(
                ArtifactMismatch(
                    alias=alias,
                    reason="unexpected_actual",
                    expected=None,
                    actual=actual_digest,
                    hint="Expected set does not include this function.",
                ),
            )

        return VerificationResult(ok=not mismatches, mismatches=tuple(mismatches))

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "digests": dict(sorted(self.digests.items())),
        }


def archive_digest(path: str | Path) -> str:
    hasher = hashlib.sha256()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


__all__ = ["ArtifactManifest", "ArtifactMismatch", "VerificationResult", "archive_digest"]
