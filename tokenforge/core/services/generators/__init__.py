"""
Generators — turn a token tree into platform-specific files.

Each built-in module exposes ``generate(context)`` and writes its files
under ``context.output_dir``.  Plugins follow the same contract; see
``registry.py`` for how names resolve to generators.
"""
