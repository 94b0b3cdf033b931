"""LayerZero V2 OFT deployment and bridging.

- :py:mod:`eth_oft.layerzero.deployment` deploys an OFT with the same CREATE2
  address on several chains and wires the peer mesh

- :py:mod:`eth_oft.layerzero.bridge` sends OFT tokens between chains
"""
