"""Infrastructure layer — the file-backed collection store and templates.

Type definitions and documents live on disk as markdown with YAML
frontmatter. The store owns reading, writing, and classifying them;
it knows nothing about task roles or path templates.
"""
