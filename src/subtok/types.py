"""
Core types for subword merging.
"""

type Symbol = str
type SymbolSequence = list[Symbol]
type PairKey = tuple[Symbol, Symbol]
type PairTally = dict[PairKey, int]
