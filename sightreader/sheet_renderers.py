"""Renderer implementations for exercise sheet output formats."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, cast

from sightreader.sheet_models import ScoreDocument


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        subtitle: str = "",
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        """Render output into a file content string."""


class VerovioHtmlRenderer(SheetRenderer):
    """Render an exercise's MusicXML into a self-contained HTML page with inline SVG."""

    # Verovio layout in abstract units (~0.1 mm); landscape so a round fits one system
    _PAGE_WIDTH: int = 2970
    _PAGE_HEIGHT: int = 2100
    _SCALE: int = 55
    _PAGE_MARGIN: int = 80

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        subtitle: str = "",
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        if musicxml_bytes is None:
            raise ValueError("musicxml_bytes is required for HTML rendering.")

        svgs = self.render_svgs(musicxml_bytes)
        return self.build_html(title, svgs, subtitle=subtitle)

    def render_svgs(self, musicxml_bytes: bytes) -> list[str]:
        """
        Render a MusicXML document to SVG strings via verovio, one per page.

        Raises:
            ValueError: If verovio cannot load the MusicXML data.
        """
        import verovio

        tk = verovio.toolkit()
        tk.setOptions(
            {
                "pageHeight": self._PAGE_HEIGHT,
                "pageWidth": self._PAGE_WIDTH,
                "scale": self._SCALE,
                "pageMarginTop": self._PAGE_MARGIN,
                "pageMarginBottom": self._PAGE_MARGIN,
                "pageMarginLeft": self._PAGE_MARGIN,
                "pageMarginRight": self._PAGE_MARGIN,
                "adjustPageHeight": True,
                "header": "none",
                "footer": "none",
            }
        )

        loaded: bool = tk.loadData(musicxml_bytes.decode("utf-8"))
        if not loaded:
            raise ValueError("verovio could not load the MusicXML data.")

        page_count: int = tk.getPageCount()
        return [self._render_page_svg(tk, page_no) for page_no in range(1, page_count + 1)]

    def _render_page_svg(self, toolkit: Any, page_no: int) -> str:
        """Render one page; older verovio bindings only take positional arguments."""
        try:
            return cast(str, toolkit.renderToSVG(pageNo=page_no, xmlDeclaration=False))
        except TypeError:
            return cast(str, toolkit.renderToSVG(page_no))

    def build_html(self, title: str, svgs: list[str], subtitle: str = "") -> str:
        """
        Wrap SVG pages in a self-contained HTML document.

        The exercise sits on a single white card; the subtitle (key, clef,
        mode) is shown under the heading when given.
        """
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        caption = f'  <p class="caption">{_escape_html(subtitle)}</p>\n' if subtitle else ""
        pages = "\n".join(f'  <div class="exercise">{svg}</div>' for svg in svgs)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    *, *::before, *::after {{ box-sizing: border-box; }}
    body {{
      font-family: system-ui, sans-serif;
      background: #0f172a;
      color: #e2e8f0;
      margin: 0;
      padding: 2rem;
    }}
    h1 {{
      text-align: center;
      font-size: 1.5rem;
      margin-bottom: 0.25rem;
    }}
    .caption {{
      text-align: center;
      font-family: ui-monospace, monospace;
      font-size: 0.85rem;
      color: #94a3b8;
      margin-top: 0;
      margin-bottom: 1.5rem;
    }}
    .exercise {{
      background: #fff;
      border-radius: 12px;
      margin: 0 auto 2rem;
      max-width: 1100px;
      padding: 1rem;
      overflow-x: auto;
    }}
    .exercise svg {{
      display: block;
      width: 100%;
      height: auto;
    }}
    @media print {{
      body {{
        background: #fff;
        color: #000;
        padding: 0;
      }}
      .exercise {{
        border-radius: 0;
        page-break-after: always;
      }}
    }}
  </style>
</head>
<body>
{heading}{caption}{pages}
</body>
</html>"""


class VexflowMarkdownRenderer(SheetRenderer):
    """Render an exercise score into Markdown with an embedded VexFlow script."""

    @property
    def default_extension(self) -> str:
        return ".md"

    def render(
        self,
        *,
        title: str,
        subtitle: str = "",
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        if score_document is None:
            raise ValueError("score_document is required for md-vexflow rendering.")

        title_safe = _escape_html(title)
        caption = f"_{_escape_html(subtitle)}_\n\n" if subtitle else ""
        score_json = json.dumps(asdict(score_document), separators=(",", ":"))
        score_json = score_json.replace("</", "<\\/")

        return f"""# {title_safe}

{caption}This Markdown uses embedded JavaScript + VexFlow. Open it in a Markdown viewer that allows script execution.

<style>
  #sightreader-score {{
    border: 1px solid #d8d8d8;
    border-radius: 8px;
    background: #ffffff;
    padding: 0.5rem;
    overflow-x: auto;
  }}
</style>

<div id="sightreader-score"></div>
<script id="sightreader-score-data" type="application/json">{score_json}</script>
<script type="module">
  import {{
    Accidental,
    Beam,
    Formatter,
    Renderer,
    Stave,
    StaveNote,
    Voice
  }} from "https://cdn.jsdelivr.net/npm/vexflow@4.2.3/build/esm/entry/vexflow.js";

  const host = document.getElementById("sightreader-score");
  const payloadNode = document.getElementById("sightreader-score-data");

  if (!host || !payloadNode) {{
    throw new Error("Missing VexFlow score container.");
  }}

  const payload = JSON.parse(payloadNode.textContent || "{{}}");
  const clef = payload.clef || "treble";
  const keySignature = payload.key_signature || "C";
  const width = Number(payload.width) || 400;
  const entries = Array.isArray(payload.notes) ? payload.notes : [];

  const renderer = new Renderer(host, Renderer.Backends.SVG);
  renderer.resize(width + 40, 200);
  const context = renderer.getContext();

  const stave = new Stave(10, 40, width);
  stave.addClef(clef).addKeySignature(keySignature).addTimeSignature(payload.time_signature || "4/4");
  stave.setContext(context).draw();

  const staveNotes = entries.map((entry) => {{
    const staveNote = new StaveNote({{
      clef,
      keys: entry.keys,
      duration: entry.duration || "q",
      stem_direction: 1,
    }});
    staveNote.setStyle({{ fillStyle: entry.color, strokeStyle: entry.color }});
    return staveNote;
  }});

  const voice = new Voice({{ num_beats: payload.beats || 4, beat_value: payload.beat_value || 4 }});
  voice.setMode(Voice.Mode.SOFT);
  voice.addTickables(staveNotes);

  // Hides accidentals already in the signature and keeps explicit naturals.
  Accidental.applyAccidentals([voice], keySignature);

  const beams = [];
  let group = [];
  let lastGroup = null;
  entries.forEach((entry, index) => {{
    const groupIndex = entry.beam_group;
    if (groupIndex !== lastGroup && group.length > 0) {{
      beams.push(new Beam(group));
      group = [];
    }}
    if (groupIndex !== null && groupIndex !== undefined) {{
      group.push(staveNotes[index]);
    }}
    lastGroup = groupIndex;
  }});
  if (group.length > 0) {{
    beams.push(new Beam(group));
  }}

  new Formatter().joinVoices([voice]).format([voice], width - 80);
  voice.draw(context, stave);
  beams.forEach((beam) => beam.setContext(context).draw());
</script>
"""
