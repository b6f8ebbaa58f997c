"""
InvoiceMe - client per la fatturazione

Livello di presentazione e orchestrazione sopra il backend REST:
clienti, ciclo di vita delle fatture, pagamenti, solleciti,
portale pubblico di pagamento e assistente conversazionale.
"""

__version__ = "1.0.0"
