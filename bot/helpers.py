from typing import List, Optional

FACET_TITLES = [
    ("categories", "📁 Categories"),
    ("tags", "🏷️ Tags"),
    ("cameras", "📷 Cameras"),
    ("lenses", "🔭 Lenses"),
    ("locations", "📍 Locations"),
    ("apertures", "🔆 Apertures"),
    ("shutter_speeds", "⏱️ Shutter speeds"),
    ("iso_values", "🎞️ ISO"),
]

def image_caption(image: dict, category_name: Optional[str] = None) -> str:
    """Caption for the first photo of a media group"""
    lines = [image.get("title") or "Untitled"]
    if category_name:
        lines[0] += f" | {category_name}"
    metadata = image.get("metadata") or {}
    exif = [metadata.get(key) for key in ("camera", "lens", "aperture", "shutter_speed")]
    if metadata.get("iso"):
        exif.append(f"ISO {metadata['iso']}")
    exif = [value for value in exif if value]
    if exif:
        lines.append("📷 " + " · ".join(exif))
    if image.get("tags"):
        lines.append(f"🏷️ Tags: {', '.join(image['tags'])}")
    return "\n".join(lines)

def format_attributes(attributes: dict, top: int = 5) -> str:
    """Render facet counts, most common values first"""
    sections: List[str] = []
    for key, title in FACET_TITLES:
        values = sorted(attributes.get(key) or [], key=lambda a: (-a["count"], a["label"]))
        if not values:
            continue
        entries = "\n".join(f"- {a['label']} ({a['count']})" for a in values[:top])
        sections.append(f"{title}\n{entries}")
    return "\n\n".join(sections)

def photo_url(image: dict) -> str:
    """Delivery URL when the backend could build one, the stored URL otherwise"""
    return image.get("delivery_url") or image["image_path"]
