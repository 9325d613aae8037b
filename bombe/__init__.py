"""
Bombe -- Enigma I Ciphertext-Only Key Search
=============================================

Brute-force cryptanalysis of three-rotor Enigma I messages. Every key of
(rotor order x reflector x start positions) is tried; each decryption is
scored against English letter frequencies and the best candidates are
ranked.

Modules:
    - bombe.core.rotor: Rotor wirings and the rotor table
    - bombe.core.machine: Enigma I simulator and machine pool
    - bombe.core.batch: NumPy lockstep evaluator
    - bombe.core.engine: Search engine
    - bombe.analyzers: Frequency scoring and crib matching
    - bombe.output: Console and report output
    - bombe.cli: Click-based command-line interface
"""

__version__ = "1.0.0"
