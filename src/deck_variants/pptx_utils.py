"""
PPTX Object-Model Utilities

Low-level python-pptx / lxml helpers used by the presentation host:
removing shapes and slides, and copying a slide from one presentation
into another together with the parts it references.
"""

import copy
import logging
import re
from typing import Dict, Iterable, Optional, Tuple

from lxml import etree
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.opc.package import Part, XmlPart
from pptx.opc.packuri import PackURI

logger = logging.getLogger(__name__)

# OOXML namespaces
NSMAP = {
    'a': 'http://schemas.openxmlformats.org/drawingml/2006/main',
    'p': 'http://schemas.openxmlformats.org/presentationml/2006/main',
    'p14': 'http://schemas.microsoft.com/office/powerpoint/2010/main',
    'r': 'http://schemas.openxmlformats.org/officeDocument/2006/relationships',
}

R_ATTR_PREFIX = f"{{{NSMAP['r']}}}"

# Shape elements living directly under p:spTree
_SHAPE_TAGS = {'sp', 'pic', 'graphicFrame', 'grpSp', 'cxnSp', 'contentPart'}

# Relationships that belong to the slide itself, not to its content
_SKIP_RELTYPES = {RT.SLIDE_LAYOUT, RT.NOTES_SLIDE, RT.SLIDE, RT.COMMENTS}

# Source part id -> (source part, imported part); owned by the target deck
PartCache = Dict[int, Tuple[Part, Part]]


def shape_text(shape) -> Optional[str]:
    """Return the full text of a shape, or None if it has no text frame."""
    if not getattr(shape, 'has_text_frame', False):
        return None
    return shape.text_frame.text


def remove_shape(shape) -> None:
    """Detach a shape's element from its slide's shape tree.

    Raises:
        ValueError: If the shape is already detached
    """
    element = shape._element
    parent = element.getparent()
    if parent is None:
        raise ValueError(f"shape '{shape.name}' is not attached to a slide")
    parent.remove(element)


def _remove_slide_references(presentation, slide_id: str, r_id: Optional[str]) -> None:
    """Remove the section and custom-show entries that point at a slide."""
    for ref in list(presentation.iter(f"{{{NSMAP['p14']}}}sldId")):
        if ref.get('id') == slide_id:
            ref.getparent().remove(ref)

    if not r_id:
        return
    for show in presentation.iter(f"{{{NSMAP['p']}}}custShow"):
        for ref in list(show.iter(f"{{{NSMAP['p']}}}sld")):
            if ref.get(f'{R_ATTR_PREFIX}id') == r_id:
                ref.getparent().remove(ref)


def remove_slide(prs, position: int) -> None:
    """Remove the slide at 0-based ``position`` from a presentation.

    Drops the presentation part's relationship to the slide so the slide
    part (and anything only it references) is not written on save. Section
    and custom-show entries naming the slide are removed with it.
    """
    sld_id_lst = prs.slides._sldIdLst
    sld_ids = list(sld_id_lst)
    if not 0 <= position < len(sld_ids):
        raise IndexError(f"slide position {position} out of range ({len(sld_ids)} slides)")

    sld_id = sld_ids[position]
    r_id = sld_id.get(f'{R_ATTR_PREFIX}id')
    _remove_slide_references(prs.part._element, sld_id.get('id'), r_id)
    sld_id_lst.remove(sld_id)
    # drop_rel keeps relationships still referenced from the presentation XML
    if r_id:
        prs.part.drop_rel(r_id)


def strip_slides(prs) -> int:
    """Remove every slide, keeping masters, layouts and theme.

    Returns:
        Number of slides removed
    """
    count = len(prs.slides)
    for position in range(count - 1, -1, -1):
        remove_slide(prs, position)
    return count


def _all_layouts(prs) -> list:
    return [layout for master in prs.slide_masters for layout in master.slide_layouts]


def find_matching_layout(source_slide, source_prs, target_prs):
    """Find the target layout corresponding to a source slide's layout.

    Target decks are file clones of the master, so layouts are first matched
    by position across all slide masters, then by name. Falls back to the
    first target layout.
    """
    source_layout = source_slide.slide_layout
    source_partname = str(source_layout.part.partname)
    target_layouts = _all_layouts(target_prs)

    if not target_layouts:
        raise ValueError("target presentation has no slide layouts")

    for position, layout in enumerate(_all_layouts(source_prs)):
        if str(layout.part.partname) == source_partname:
            if position < len(target_layouts) and target_layouts[position].name == layout.name:
                return target_layouts[position]
            break

    for layout in target_layouts:
        if layout.name == source_layout.name:
            return layout

    logger.warning(
        f"No layout named '{source_layout.name}' in target, using '{target_layouts[0].name}'"
    )
    return target_layouts[0]


def unique_partname(package, original_partname, reserved: Iterable[str] = ()) -> PackURI:
    """Generate a partname not yet used in the target package.

    Keeps the original name when free, otherwise bumps the numeric suffix
    (``/ppt/media/image3.png`` -> ``/ppt/media/image4.png``). Names in
    ``reserved`` count as used even if no part is related to them yet.
    """
    existing = {str(p.partname) for p in package.iter_parts()} | set(reserved)
    original = str(original_partname)

    if original not in existing:
        return PackURI(original)

    match = re.match(r'^(.*?)(\d*)(\.\w+)$', original)
    prefix, _, ext = match.groups()
    idx = max(
        (
            int(m.group(1))
            for name in existing
            if name.startswith(prefix) and (m := re.match(r'(\d+)\.\w+$', name[len(prefix):]))
        ),
        default=0,
    ) + 1
    while f'{prefix}{idx}{ext}' in existing:
        idx += 1
    return PackURI(f'{prefix}{idx}{ext}')


def _import_part(source_part, target_package, part_cache: PartCache) -> Part:
    """Copy a referenced part (image, media, chart, embedded object) into the target package.

    The part's own relationships are imported as well, so a chart keeps its
    embedded workbook. XML parts get their ``r:*`` references rewritten to
    the new relationship ids.
    """
    cached = part_cache.get(id(source_part))
    if cached is not None:
        return cached[1]

    partname = unique_partname(
        target_package,
        source_part.partname,
        reserved=(str(part.partname) for _, part in part_cache.values()),
    )
    if isinstance(source_part, XmlPart):
        imported = XmlPart(
            partname,
            source_part.content_type,
            target_package,
            copy.deepcopy(source_part._element),
        )
    else:
        imported = Part(
            partname,
            source_part.content_type,
            package=target_package,
            blob=source_part.blob,
        )
    # cached before recursing so parts referring back to each other are imported once
    part_cache[id(source_part)] = (source_part, imported)

    rid_map = {}
    if isinstance(imported, XmlPart):
        rid_map = import_relationships(imported._element, source_part, imported, part_cache)

    # relationships no attribute names, e.g. a chart's style and color parts
    for r_id, rel in source_part.rels.items():
        if r_id in rid_map or rel.reltype in _SKIP_RELTYPES:
            continue
        new_rid = _relate_copy(rel, imported, part_cache)
        if new_rid != r_id and not isinstance(imported, XmlPart):
            logger.warning(
                f"Relationship {r_id} of {source_part.partname} became {new_rid} in {imported.partname}"
            )
    return imported


def _relate_copy(rel, target_part, part_cache: PartCache) -> str:
    """Relate ``target_part`` to a copy of ``rel``'s target and return the new rId."""
    if rel.is_external:
        return target_part.relate_to(rel.target_ref, rel.reltype, is_external=True)
    imported = _import_part(rel.target_part, target_part.package, part_cache)
    return target_part.relate_to(imported, rel.reltype)


def import_relationships(element, source_part, target_part, part_cache: PartCache) -> Dict[str, str]:
    """Re-create the relationships an element references on the target part.

    Every ``r:*`` attribute in ``element`` is rewritten to a relationship id
    valid in ``target_part``. References to slide-level relationships (other
    slides, layouts, notes) are cleared.

    Returns:
        Mapping of old rId to new rId ('' for cleared references)
    """
    rid_map: Dict[str, str] = {}

    for el in element.iter(tag=etree.Element):
        for attr_name, old_rid in el.attrib.items():
            if not attr_name.startswith(R_ATTR_PREFIX) or old_rid in rid_map:
                continue

            rel = source_part.rels.get(old_rid)
            if rel is None or rel.reltype in _SKIP_RELTYPES:
                rid_map[old_rid] = ''
                continue

            rid_map[old_rid] = _relate_copy(rel, target_part, part_cache)

    for el in element.iter(tag=etree.Element):
        for attr_name in list(el.attrib.keys()):
            if attr_name.startswith(R_ATTR_PREFIX) and el.get(attr_name) in rid_map:
                el.set(attr_name, rid_map[el.get(attr_name)])

    return rid_map


def _clear_sp_tree(sp_tree) -> None:
    """Remove all shapes from a spTree, keeping its group properties."""
    for child in list(sp_tree):
        if etree.QName(child).localname in _SHAPE_TAGS:
            sp_tree.remove(child)


def _copy_background(source_slide, target_slide, part_cache: PartCache) -> None:
    bg_tag = f"{{{NSMAP['p']}}}bg"
    source_bg = source_slide._element.cSld.find(bg_tag)
    if source_bg is None:
        return

    target_cSld = target_slide._element.cSld
    existing = target_cSld.find(bg_tag)
    if existing is not None:
        target_cSld.remove(existing)

    new_bg = copy.deepcopy(source_bg)
    import_relationships(new_bg, source_slide.part, target_slide.part, part_cache)
    target_cSld.insert(0, new_bg)


def _copy_notes(source_slide, target_slide) -> None:
    if not source_slide.has_notes_slide:
        return
    source_frame = source_slide.notes_slide.notes_text_frame
    if source_frame is None or not source_frame.text:
        return
    target_frame = target_slide.notes_slide.notes_text_frame
    if target_frame is not None:
        target_frame.text = source_frame.text


def copy_slide(source_slide, source_prs, target_prs, part_cache: PartCache):
    """Append a copy of ``source_slide`` to ``target_prs``.

    The new slide uses the matching target layout and receives deep copies of
    every source shape, the slide background and the speaker notes text.
    Pictures, media and hyperlinks are re-related in the target package.

    Returns:
        The new python-pptx slide
    """
    layout = find_matching_layout(source_slide, source_prs, target_prs)
    new_slide = target_prs.slides.add_slide(layout)

    # add_slide can leave slide.shapes bound to a detached spTree; work on the part's tree
    sp_tree = new_slide.part._element.cSld.spTree
    _clear_sp_tree(sp_tree)

    for shape in source_slide.shapes:
        new_el = copy.deepcopy(shape._element)
        import_relationships(new_el, source_slide.part, new_slide.part, part_cache)
        sp_tree.append(new_el)

    _copy_background(source_slide, new_slide, part_cache)
    _copy_notes(source_slide, new_slide)

    new_slide.__dict__.pop('shapes', None)
    return new_slide
