"""Local rule-based responder.

Used whenever the hosted model is unavailable, errors, or is not
configured. Deterministic and free of side effects: the same prompt
always gets the same answer.

Rules are evaluated in order on a lower-cased, trimmed copy of the
prompt and the first match wins. The table is shared by the client and
the proxy server; they differ only in the answer given when no rule
matches.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

NO_INPUT_MESSAGE = "Maaf, saya tidak menerima input. Bisa ketik pertanyaanmu?"
GREETING_MESSAGE = "Halo! Saya Kisah Sukses Pro — bagaimana saya bisa bantu hari ini?"
HELP_MESSAGE = "Tentu — jelaskan masalah atau pertanyaanmu secara singkat, lalu saya akan bantu."
SUMMARY_NEEDS_TEXT_MESSAGE = "Berikan teks setelah kata 'ringkas:' untuk saya ringkas."
MOTIVATION_MESSAGE = (
    "Setiap langkah kecil adalah bagian dari perjalanan besar. "
    "Fokuslah pada konsistensi — bukan hanya pada hasil instan."
)
CODE_MESSAGE = (
    "Berikan potongan kode atau deskripsikan error yang muncul, "
    "saya akan bantu analisis dan usulkan perbaikan."
)

# Default answer on the client: nudge the user to rephrase or go online
GENERIC_FALLBACK_MESSAGE = (
    "Maaf, saya belum bisa menjawab itu secara offline. Coba jelaskan dengan kata-kata "
    "yang lebih spesifik atau nyalakan koneksi internet untuk jawaban lebih lengkap."
)
# Default answer on the proxy server when no hosted model key is configured
OFFLINE_MESSAGE = (
    "AI offline: tidak ada API key terkonfigurasi. Hubungkan OPENAI_API_KEY pada "
    "environment untuk jawaban lebih komprehensif."
)

GREETING_TOKENS = ("halo", "hai", "hello")
HELP_TOKENS = ("bantu", "tolong")
SUMMARY_DIRECTIVES = ("ringkas:", "summarize:")
SUMMARY_TOKENS = ("ringkasan", "summarize")
MOTIVATION_TOKENS = ("motivasi", "inspirasi", "kisah sukses")
CODE_TOKENS = ("kode", "bug", "debug")

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")


def _contains_any(text: str, tokens: tuple[str, ...]) -> bool:
    return any(token in text for token in tokens)


def summarize_first_sentences(prompt: str, count: int = 2) -> str:
    """Return the first `count` sentences of the text after the first colon."""
    _, _, remainder = prompt.partition(":")
    text = remainder.strip()
    if not text:
        return SUMMARY_NEEDS_TEXT_MESSAGE

    sentences = [s.strip() for s in _SENTENCE_RE.findall(text)] or [text]
    return " ".join(sentences[:count]).strip()


@dataclass(frozen=True)
class Rule:
    """One row of the rule table.

    Attributes:
        name: Identifier used in logs and tests
        matches: Predicate on the normalized (lower-cased, trimmed) prompt
        respond: Builds the answer from the original prompt
    """

    name: str
    matches: Callable[[str], bool]
    respond: Callable[[str], str]


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("empty", lambda p: not p, lambda _: NO_INPUT_MESSAGE),
    Rule("greeting", lambda p: _contains_any(p, GREETING_TOKENS), lambda _: GREETING_MESSAGE),
    Rule("help", lambda p: _contains_any(p, HELP_TOKENS), lambda _: HELP_MESSAGE),
    Rule(
        "summarize",
        lambda p: p.startswith(SUMMARY_DIRECTIVES) or _contains_any(p, SUMMARY_TOKENS),
        summarize_first_sentences,
    ),
    Rule("motivation", lambda p: _contains_any(p, MOTIVATION_TOKENS), lambda _: MOTIVATION_MESSAGE),
    Rule("code", lambda p: _contains_any(p, CODE_TOKENS), lambda _: CODE_MESSAGE),
)


class RuleEngine:
    """Ordered, first-match-wins rule table.

    Example:
        ```python
        engine = RuleEngine()
        engine.respond("halo")  # GREETING_MESSAGE
        engine.respond("ringkas: Satu. Dua. Tiga.")  # "Satu. Dua."

        server_engine = RuleEngine(default_message=OFFLINE_MESSAGE)
        ```
    """

    def __init__(
        self,
        rules: tuple[Rule, ...] = DEFAULT_RULES,
        default_message: str = GENERIC_FALLBACK_MESSAGE,
    ) -> None:
        self._rules = rules
        self._default = default_message

    @staticmethod
    def normalize(prompt: str | None) -> str:
        return (prompt or "").lower().strip()

    def match(self, prompt: str | None) -> Rule | None:
        """Return the first rule matching the prompt, or None."""
        normalized = self.normalize(prompt)
        for rule in self._rules:
            if rule.matches(normalized):
                return rule
        return None

    def respond(self, prompt: str | None) -> str:
        """Answer a prompt locally. Never raises and never returns None."""
        rule = self.match(prompt)
        if rule is None:
            return self._default
        return rule.respond(prompt or "")

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def default_message(self) -> str:
        return self._default
