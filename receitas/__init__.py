"""Receitas: personal recipe book backend."""
