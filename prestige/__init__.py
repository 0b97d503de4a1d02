"""Prestige Check: daily company comparisons ranked by an ELO rating."""
