"""Protocol-specific configuration.

Contract addresses and ABIs for the lending market the position engine
reads from:
  from src.protocols.aave.config import AAVE_V3_POOL_ADDRESS
  from src.protocols.aave.abis import POOL_ABI
"""
