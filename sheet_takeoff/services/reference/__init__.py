"""고정 어휘 사전 패키지"""

from .lexicon import Lexicon, build_lexicon, get_default_lexicon

__all__ = ["Lexicon", "build_lexicon", "get_default_lexicon"]
