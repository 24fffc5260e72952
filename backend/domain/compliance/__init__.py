"""
Compliance Domain - certification pass/fail tabulation over primary parts.

Why a part fails is decided by an external compliance lookup; this domain
only aggregates the verdicts into rates.
"""
