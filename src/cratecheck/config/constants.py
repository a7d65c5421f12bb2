"""Configuration constants.

Values here are protocol facts of crates.io and Cargo. Configurable
defaults live in models.py.
"""

DEFAULT_REGISTRY_URL = "https://crates.io"
"""crates.io root."""

DEFAULT_USER_AGENT = "cratecheck (https://github.com/cratecheck/cratecheck)"
"""crates.io asks API clients to identify themselves."""

MANIFEST_FILENAME = "Cargo.toml"
"""Cargo manifest file name."""

DEFAULT_IGNORE_PATHS: tuple[str, ...] = (
    ".cargo_vcs_info.json",
    "Cargo.toml",
    "Cargo.toml.orig",
    "Cargo.lock",
    "README.md",
    "CHANGELOG.md",
    "LICENSE.md",
    "LICENSE-MIT",
    "LICENSE-APACHE",
    "crates-io.md",
)
"""Files `cargo publish` rewrites or generates regardless of source changes."""

SOURCE_REMOTE_NAME = "source"
"""Remote name used when bridging one local repository into another."""

COMMIT_SIGNATURE_NAME = "cratecheck"
COMMIT_SIGNATURE_EMAIL = "cratecheck@localhost"
"""Signature of the single commit created for a published tarball."""
