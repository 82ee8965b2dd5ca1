"""
Signature module.

Signature images (drawn, typed, uploaded), the visible attestation stamp and
PDF compositing (overlay merge) of a recipient's fields.
"""
