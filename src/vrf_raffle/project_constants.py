"""
Fixed rules of the raffle.

These values define how a session is settled and how randomness is requested.
Changing them changes who gets paid what and MUST be publicly announced.
"""

# Amounts are tracked in wei
ETHER_DECIMALS = 18
ONE_ETHER = 10**ETHER_DECIMALS

# Owner cut of the final pooled balance, in percent (truncating)
OWNER_FEE_PERCENT = 10

# Randomness request parameters
REQUEST_CONFIRMATIONS = 3
NUM_WORDS = 1
NATIVE_PAYMENT = False
DEFAULT_CALLBACK_GAS_LIMIT = 500_000

# Local/mock network defaults
DEFAULT_KEY_HASH = "0x787d74caea10b2b357790d5b5247c2f63d1d91572a9846f780606e4d953677ae"
DEFAULT_SUBSCRIPTION_ID = 0
MOCK_COORDINATOR_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
RAFFLE_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
