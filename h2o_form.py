""" form encoding of request bodies (application/x-www-form-urlencoded)

Values are written with their plain string form. Nothing is percent-escaped,
so a value containing '&' or '=' produces an ambiguous body. H2O accepts the
unescaped form for paths, frame names and column lists, which is all this
client sends.
"""

from collections import namedtuple

BOOLEAN = 'boolean'
SEQUENCE = 'sequence'
SCALAR = 'scalar'

FormField = namedtuple('FormField', 'name kind value')


def field_kind(value):
    # bool is an int subclass, so it must be tested first
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (list, tuple)):
        return SEQUENCE
    return SCALAR


def form_fields(record):
    """ ordered FormFields from a mapping or an iterable of (name, value) pairs """
    pairs = record.items() if hasattr(record, 'items') else record
    return [FormField(name, field_kind(value), value) for name, value in pairs]


def element_text(element):
    """ named entities (frames, keys) are written by name """
    if isinstance(element, dict) and 'name' in element:
        return str(element['name'])
    name = getattr(element, 'name', None)
    if name is not None:
        return str(name)
    return str(element)


def field_text(field):
    if field.kind == BOOLEAN:
        return 'true' if field.value else 'false'
    if field.kind == SEQUENCE:
        return '[' + ','.join(element_text(e) for e in field.value) + ']'
    return str(field.value)


def encode_form(record):
    """ encode record as name=value pairs joined by '&' """
    fields = record if _is_encoded(record) else form_fields(record)
    return '&'.join(f'{field.name}={field_text(field)}' for field in fields)


def _is_encoded(record):
    return isinstance(record, list) and all(isinstance(f, FormField) for f in record) and len(record) > 0
