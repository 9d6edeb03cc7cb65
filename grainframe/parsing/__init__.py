"""
This package contains all modules related to parsing and decoding frames
received from grain condition monitoring hardware.

Sub-packages handle specific stages:

- ``tokens``: Splitting hex frame strings into byte tokens.
- ``frame``: Header, temperature array and environmental block decoding.
"""
