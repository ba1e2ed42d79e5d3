"""Minimal ``<img>`` tag rendering."""
import html


def img_tag(url: str, attributes: dict | None = None) -> str:
    """Render an ``<img>`` tag.

    Args:
        url: Value of the ``src`` attribute
        attributes: Extra attributes; None values are skipped, True renders
            a bare boolean attribute

    Returns:
        HTML markup with every value escaped
    """
    parts = [f'src="{html.escape(url, quote=True)}"']
    for name, value in (attributes or {}).items():
        if value is None or value is False or name == "src":
            continue
        if value is True:
            parts.append(html.escape(name))
        else:
            parts.append(f'{html.escape(name)}="{html.escape(str(value), quote=True)}"')
    return f"<img {' '.join(parts)}>"
