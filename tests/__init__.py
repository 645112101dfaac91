"""Test configuration and utilities for the Gasless SDK."""

import logging
import sys
from pathlib import Path

# Add the src directory to the path so we can import the SDK modules
test_dir = Path(__file__).parent
project_dir = test_dir.parent
src_dir = project_dir / "src"
sys.path.insert(0, str(src_dir))

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

# Suppress noisy logs during testing
logging.getLogger('aiohttp').setLevel(logging.WARNING)
logging.getLogger('web3').setLevel(logging.WARNING)

# Addresses for consistent testing
TEST_ADDRESSES = {
    'sender': '0x1111111111111111111111111111111111111111',
    'recipient': '0x2222222222222222222222222222222222222222',
    'token': '0xcac524bca292aaade2df8a05cc58f0a65b1b3bb9',
    'counter': '0x4444444444444444444444444444444444444444',
    'delegate': '0xe6cae83bde06e4c305530e199d7217f42808555b',
    'fee_receiver': '0x5555555555555555555555555555555555555555',
    'invalid': '0xinvalid'
}
