"""
Client-side core for the RWA cash-flow tokenization program.

Derives program addresses, encodes instructions, decodes account data and
reproduces the program's integer arithmetic. Signing, transport and the
program itself live outside this package.
"""

__version__ = "0.1.0"
