"""
Documents module.

Templates (prepared PDFs with recipients and fields), their lifecycle,
persistence, the owner setup workflow and the recipient signing workflow.
"""
