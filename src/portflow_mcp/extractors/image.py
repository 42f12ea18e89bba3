"""Image extraction — filename and MIME pattern matching, no pixel analysis."""

from __future__ import annotations

from ..models.analysis import DocumentContent, FileInput
from ..text import format_file_size

# (filename keywords, kind, description template, hints). First hit wins;
# the vector rule is keyed on MIME type and sits between "web" and "3d".
IMAGE_VOCABULARY: tuple[tuple[tuple[str, ...], str, str, tuple[str, ...]], ...] = (
    (
        ("screenshot", "screen"), "screenshot",
        "Application or website screenshot ({size}). Captures user interface, functionality, or web "
        "content. Demonstrates digital product or website features.",
        ("interface", "application", "website", "digital"),
    ),
    (
        ("mockup", "wireframe", "prototype"), "mockup",
        "Design mockup or wireframe ({size}). Shows user interface design, layout structure, and visual "
        "planning. Professional design documentation.",
        ("design", "ui", "wireframe", "planning"),
    ),
    (
        ("logo", "brand", "identity"), "branding",
        "Logo or branding design ({size}). Professional brand identity work featuring visual design and "
        "corporate identity elements.",
        ("branding", "logo", "identity", "corporate"),
    ),
    (
        ("ui", "interface", "dashboard"), "ui",
        "User interface design ({size}). Shows application interface, dashboard, or digital product "
        "design. Professional UI/UX work.",
        ("ui", "interface", "dashboard", "user experience"),
    ),
    (
        ("web", "website", "landing"), "web",
        "Web design project ({size}). Website or web application design showing layout, visual design, "
        "and user experience work.",
        ("web", "website", "design", "layout"),
    ),
)

_VECTOR = (
    "vector",
    "Vector graphic design ({size}). Scalable vector artwork showing professional design skills and "
    "technical expertise.",
    ("vector", "graphic", "scalable", "technical"),
)
_RENDER = (
    ("render", "3d"), "3d",
    "3D render or visualization ({size}). Professional 3D modeling, rendering, or visualization work "
    "demonstrating technical and artistic skills.",
    ("3d", "render", "visualization", "modeling"),
)
_DEFAULT = (
    "image",
    "Visual design content ({size}). Professional creative work showcasing design skills and "
    "artistic expertise.",
    ("design", "visual", "creative", "professional"),
)


def classify_image(file_name: str, mime_type: str = "") -> tuple[str, str, tuple[str, ...]]:
    """Return ``(kind, description_template, hints)`` for an image upload."""
    lowered = file_name.lower()
    for keywords, kind, template, hints in IMAGE_VOCABULARY:
        if any(k in lowered for k in keywords):
            return kind, template, hints
    if "svg" in mime_type.lower() or lowered.endswith(".svg"):
        return _VECTOR
    keywords, kind, template, hints = _RENDER
    if any(k in lowered for k in keywords):
        return kind, template, hints
    return _DEFAULT


async def extract_image(item: FileInput) -> DocumentContent:
    """Heuristic image summary; remote vision is the model strategy's job."""
    kind, template, hints = classify_image(item.name, item.mime_type)
    return DocumentContent(
        kind=kind,
        text=template.format(size=format_file_size(item.size)),
        hints=list(hints),
        source="heuristic",
    )
