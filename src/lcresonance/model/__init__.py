"""
The MODEL layer contains pure data structures: circuit parameters and state,
geometric primitives and the composite path built from them.
It has NO knowledge of rendering.
"""
