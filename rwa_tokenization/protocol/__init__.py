"""Protocol — адреса, кодеки и клиент программы токенизации.

- pda          : program-derived addresses
- instructions : бинарные инструкции (discriminator 0..7)
- accounts     : разбор аккаунтов по layout-таблице
- client       : оркестрация derive → encode → submit / fetch → decode
"""

from .accounts import account_discriminator, decode_account, decode_any, identify_account
from .client import AccountReader, ProtocolClient, Signer, TransactionSubmitter
from .config import Commitment, ProtocolConfig, TransactionOptions
from .instructions import AccountMeta, Action, Instruction, encode_instruction
from .pda import ProgramAddress, find_program_address

__all__ = [
    # Config
    "Commitment",
    "ProtocolConfig",
    "TransactionOptions",
    # Addresses
    "ProgramAddress",
    "find_program_address",
    # Instructions
    "AccountMeta",
    "Action",
    "Instruction",
    "encode_instruction",
    # Accounts
    "account_discriminator",
    "decode_account",
    "decode_any",
    "identify_account",
    # Client
    "AccountReader",
    "ProtocolClient",
    "Signer",
    "TransactionSubmitter",
]
