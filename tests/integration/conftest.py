"""Fixtures for end-to-end CLI runs against a small crate on disk."""

from pathlib import Path

import pytest

_MAIN = """//! Tool entry point.

fn main() {
    println!("{}", greeting());
}

use std::fmt::Write;
const NAME: &str = "world";
"""

_LIB = """use std::io;

pub fn greeting() -> String {
    format!("hello {}", NAME)
}
"""

_UTIL = """#[cfg(test)]
mod tests {
    #[test]
    fn works() {}
}

pub fn helper() {}
"""


@pytest.fixture
def crate_dir(tmp_path: Path) -> Path:
    """A crate with two files out of order and one already canonical."""
    src = tmp_path / "src"
    (src / "util").mkdir(parents=True)
    (src / "main.rs").write_text(_MAIN, encoding="utf-8")
    (src / "lib.rs").write_text(_LIB, encoding="utf-8")
    (src / "util" / "mod.rs").write_text(_UTIL, encoding="utf-8")
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\n', encoding="utf-8")
    return tmp_path
