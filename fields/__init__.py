"""Signature fields: types, coordinate transforms, placement rules and drag/resize."""
