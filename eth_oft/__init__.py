"""Deploy and bridge LayerZero OFT tokens across EVM chains."""
