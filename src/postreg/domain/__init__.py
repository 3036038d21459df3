"""Domain layer: pure parsing, validation, and indexing of posts.

Nothing in this package touches the filesystem. File discovery lives in
:mod:`postreg.infrastructure.filesystem`.
"""
