"""
Solana program and sysvar constants used by the resolver
"""

# Token Programs
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

# Associated Token Program
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

# System Program
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

# Rent Sysvar
RENT_SYSVAR_ID = "SysvarRent111111111111111111111111111111111"

# Wrapped SOL mints
NATIVE_MINT = "So11111111111111111111111111111111111111112"
NATIVE_MINT_2022 = "9pan9bMn5HatX4EJdBwg9VgCa7Uz5HL8N1m5D3NdXejP"

# Size of a token account without extensions (AccountLayout.span)
TOKEN_ACCOUNT_SIZE = 165

# Byte range of the owner field inside token account data
TOKEN_ACCOUNT_OWNER_OFFSET = 32

# getMultipleAccounts accepts at most 100 keys per request
MAX_ACCOUNTS_PER_REQUEST = 100

# Max seed length accepted by create_account_with_seed
MAX_SEED_LENGTH = 32

# System program instruction indices
SYSTEM_IX_CREATE_ACCOUNT = 0
SYSTEM_IX_TRANSFER = 2
SYSTEM_IX_CREATE_ACCOUNT_WITH_SEED = 3

# Token program instruction indices
TOKEN_IX_INITIALIZE_ACCOUNT = 1
TOKEN_IX_CLOSE_ACCOUNT = 9
TOKEN_IX_TRANSFER_CHECKED = 12
TOKEN_IX_SYNC_NATIVE = 17

# Associated token program instruction data
ATA_IX_CREATE = b""
ATA_IX_CREATE_IDEMPOTENT = bytes([1])
