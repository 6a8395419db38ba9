"""Minimal live smoke run against the real DeepL API.

Reads DEEPL_AUTH_KEY (and optionally DEEPL_SERVER_URL) from live_test/.env.
Not collected by pytest.
"""

from __future__ import annotations

import io
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC_ROOT = ROOT.parent / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from deepl_client import GlossaryEntries, Translator  # noqa: E402

translator = Translator.from_env(ROOT / ".env", log_level="DEBUG")

usage = translator.get_usage()
print(f"usage: characters={usage.character_count}/{usage.character_limit}")

result = translator.translate_text("The proton beam is stable.", target_lang="DE")
print(f"text: {result.text} (detected {result.detected_source_lang})")

glossary = translator.create_glossary(
    "live-test",
    "en",
    "de",
    GlossaryEntries.from_dict({"proton beam": "Protonenstrahl"}),
)
try:
    print(f"glossary entries: {translator.get_glossary_entries(glossary.glossary_id).to_dict()}")
finally:
    translator.delete_glossary(glossary.glossary_id)

output = io.BytesIO()
status = translator.translate_document(
    b"The proton beam is stable.",
    output,
    target_lang="DE",
    filename="live.txt",
)
print(f"document: billed={status.billed_characters} bytes={len(output.getvalue())}")
