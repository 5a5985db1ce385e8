"""
Pneuma - On-chain interaction layer for Runic.

Provides ABI parsing, call data encoding/decoding, an async JSON-RPC
client, and the contract caller that ties them together.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
