"""Identify a compiler, its platform and its defaults from predefined macros."""