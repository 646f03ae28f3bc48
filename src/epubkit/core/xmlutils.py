"""Namespace-tolerant helpers over lxml."""

from lxml import etree


def parse_xml(data: bytes) -> etree._Element:
    """Parse an XML document without resolving entities or touching the network.

    Raises:
        etree.XMLSyntaxError: If the document is not well-formed
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    return etree.fromstring(data, parser=parser)


def local_name(element: etree._Element) -> str | None:
    """Tag name without namespace, None for comments and processing instructions."""
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def namespace(element: etree._Element) -> str | None:
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).namespace


def get_attr(element: etree._Element, name: str) -> str | None:
    """Attribute value by local name, with or without a namespace prefix."""
    value = element.get(name)
    if value is not None:
        return value
    for key, value in element.attrib.items():
        if key.endswith("}" + name):
            return value
    return None


def element_text(element: etree._Element | None) -> str:
    """Whitespace-normalized text content of an element."""
    if element is None:
        return ""
    return " ".join("".join(element.itertext()).split())


def children_named(element: etree._Element, name: str) -> list[etree._Element]:
    """Direct children with the given local name."""
    return [child for child in element if local_name(child) == name]


def first_child_named(element: etree._Element, name: str) -> etree._Element | None:
    for child in element:
        if local_name(child) == name:
            return child
    return None
