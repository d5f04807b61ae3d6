"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import dataclasses
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

import order_label_converter.textruns  # noqa: E402


@dataclasses.dataclass(frozen=True)
class FixedFace:
	name: str
	advance: float = 0.5

	def width(self, text: str, size: float) -> float:
		return len(text) * size * self.advance


#============================================
@pytest.fixture
def latin_only_fonts() -> order_label_converter.textruns.FontSet:
	"""
	Font set with only a Latin face; every glyph is half an em wide.
	"""
	return order_label_converter.textruns.FontSet(faces={"latin": FixedFace("Latin")})


#============================================
@pytest.fixture
def cjk_fonts() -> order_label_converter.textruns.FontSet:
	"""
	Font set with Latin, Japanese, Korean and Simplified Chinese faces.
	"""
	return order_label_converter.textruns.FontSet(
		faces={
			"latin": FixedFace("Latin", 0.5),
			"jp": FixedFace("JP", 1.0),
			"kr": FixedFace("KR", 0.9),
			"sc": FixedFace("SC", 1.1),
		}
	)
