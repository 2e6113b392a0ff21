"""
Program addresses and protocol constants for Pump.fun bonding curves.
"""

# Program IDs
PUMP_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
METADATA_PROGRAM_ID = "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

# Update authority Pump.fun sets on every token it launches
PUMPFUN_UPDATE_AUTHORITY = "TSLvdd1pWpHVjahSpsvCXUbgwsL3JAcvokwaKt1eokM"

WSOL = "So11111111111111111111111111111111111111112"

# Anchor account discriminator: sha256("account:BondingCurve")[:8]
EXPECTED_DISCRIMINATOR = bytes([23, 183, 248, 55, 96, 216, 172, 96])

# 8-byte discriminator + five u64 fields + 1-byte bool
BONDING_CURVE_LAYOUT_SIZE = 49

TOKEN_DECIMALS = 6
LAMPORTS_PER_SOL = 1_000_000_000

# Tokens held back from the curve and released to the AMM on graduation
RESERVED_TOKENS = 206_900_000 * 10 ** TOKEN_DECIMALS

# Every Pump.fun launch mints exactly one billion tokens
PUMPFUN_TOTAL_SUPPLY = 1_000_000_000

# SPL layouts (bytes)
TOKEN_ACCOUNT_SIZE = 165
MINT_ACCOUNT_SIZE = 82

# Known program names for address inspection
PROGRAM_NAMES = {
    PUMP_PROGRAM_ID: "PUMP_FUN",
    TOKEN_PROGRAM_ID: "TOKEN_PROGRAM",
    TOKEN_2022_PROGRAM_ID: "TOKEN_2022_PROGRAM",
    ASSOCIATED_TOKEN_PROGRAM_ID: "ASSOCIATED_TOKEN_PROGRAM",
    METADATA_PROGRAM_ID: "METADATA_PROGRAM",
    SYSTEM_PROGRAM_ID: "SYSTEM_PROGRAM",
    "BPFLoaderUpgradeab1e11111111111111111111111": "BPF_UPGRADEABLE_LOADER",
    "ComputeBudget111111111111111111111111111111": "COMPUTE_BUDGET",
}
