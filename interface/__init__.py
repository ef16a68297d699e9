"""
Interface package: text front ends for the game controller.

Modules:
    cli — Terminal loop. Reads squares and commands from stdin, draws the
          board on stdout. Run with: python -m interface.cli [--opponent]
"""
