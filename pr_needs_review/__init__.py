"""
PR Needs Review
===============
Automate de labellisation des Pull Requests GitHub.
Synchronise deux labels exclusifs (awaiting-review / awaiting-changes)
et un commentaire explicatif à partir des revues, des commentaires
et de l'état draft de la PR.
"""

__version__ = "1.0.0"
