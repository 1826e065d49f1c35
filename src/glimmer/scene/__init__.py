"""Scene module.

Components:
    manager: Scene description, validation and upload to the registries
    intersection: Item fields and nearest-hit / any-hit traversal
    demo: Built-in demo scenes

Every submodule declares or writes Taichi fields; import after ti.init().
"""
