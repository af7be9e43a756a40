"""Conversion of OpenDRIVE XML into plain nested dictionaries.

The rest of the package works on the result of `readXodr` / `parseXodrString`,
which follows the usual XML-to-dict conventions:

* attributes become keys of the element's dictionary;
* child elements become keys too, with a list as value if the tag is repeated;
* elements with neither attributes nor children become their stripped text
  (the empty string for empty elements);
* text of an element which also has attributes or children is kept under ``#text``.

Namespaces are dropped from tags.
"""

import xml.etree.ElementTree as ET

from xodrnet.core.errors import MalformedDocumentError

rootTag = 'OpenDRIVE'
textKey = '#text'


def _localName(tag):
    return tag.rsplit('}', 1)[-1] if isinstance(tag, str) else tag


def elementToDict(element):
    text = (element.text or '').strip()
    children = [child for child in element if isinstance(child.tag, str)]
    if not element.attrib and not children:
        return text
    result = dict(element.attrib)
    for child in children:
        tag = _localName(child.tag)
        value = elementToDict(child)
        if tag in result:
            existing = result[tag]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[tag] = [existing, value]
        else:
            result[tag] = value
    if text:
        result[textKey] = text
    return result


def _documentFromRoot(root):
    tag = _localName(root.tag)
    if tag != rootTag:
        raise MalformedDocumentError(f'root element is <{tag}>, not <{rootTag}>')
    content = elementToDict(root)
    return {rootTag: content if isinstance(content, dict) else {}}


def readXodr(path):
    '''Read an OpenDRIVE file into a raw document.

    Raises:
        MalformedDocumentError: if the file is not well-formed XML or its root
            element is not ``OpenDRIVE``.
    '''
    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise MalformedDocumentError(f'unable to parse {path}: {e}') from e
    return _documentFromRoot(tree.getroot())


def parseXodrString(text):
    '''Like `readXodr`, but reading the XML from a string.'''
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedDocumentError(f'unable to parse OpenDRIVE XML: {e}') from e
    return _documentFromRoot(root)
