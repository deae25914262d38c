"""
Controlled vocabularies of the land register.

The values are the French labels used by the ministry's forms and stored
as-is in the database.
"""

# ── Parcel legal status ───────────────────────────────────────────────────
STATUS_FREE = "Libre"
STATUS_DISPUTED = "En litige"
STATUS_MORTGAGED = "Hypothéqué"
PARCEL_STATUSES = (STATUS_FREE, STATUS_DISPUTED, STATUS_MORTGAGED)

LAND_USES = ("Résidentiel", "Commercial", "Agricole", "Mixte")

ACQUISITION_TYPES = ("Concession", "Vente", "Donation", "Succession", "Échange")

# ── Citizen requests ──────────────────────────────────────────────────────
REQUEST_PENDING = "En attente"
REQUEST_APPROVED = "Approuvé"
REQUEST_REJECTED = "Rejeté"
REQUEST_STATUSES = (REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED)

# Allowed moves of the request workflow; approved and rejected are final.
REQUEST_TRANSITIONS = {
    REQUEST_PENDING: (REQUEST_APPROVED, REQUEST_REJECTED),
    REQUEST_APPROVED: (),
    REQUEST_REJECTED: (),
}

REQUESTABLE_DOCUMENTS = (
    "Copie du titre foncier",
    "Certificat d’enregistrement",
    "Attestation de propriété",
    "Extrait du registre foncier",
    "Copie du plan cadastral",
    "Certificat de situation juridique",
    "Attestation de non-litige",
    "Historique des litiges sur une parcelle",
    "Copie de décision administrative foncière",
    "Certificat de mutation",
    "Attestation de bornage",
    "PV de bornage",
    "Autre",
)

# Category given to an uploaded document when the client sends none.
DEFAULT_DOCUMENT_TYPE = "Autre"

# ── Administrative geography ──────────────────────────────────────────────
PROVINCES = (
    "Kinshasa", "Kongo Central", "Kwango", "Kwilu", "Mai-Ndombe", "Kasaï",
    "Kasaï Central", "Kasaï Oriental", "Lomami", "Sankuru", "Maniema",
    "Sud-Kivu", "Nord-Kivu", "Tanganyika", "Haut-Lomami", "Lualaba",
    "Haut-Katanga", "Ituri", "Tshopo", "Bas-Uele", "Haut-Uele", "Mongala",
    "Nord-Ubangi", "Sud-Ubangi", "Équateur", "Tshuapa",
)

ISSUING_AUTHORITIES = (
    "Direction des Titres Immobiliers",
    "Direction du Cadastre Foncier",
    "Direction du Contentieux Foncier et Immobilier",
    "Direction du Cadastre Fiscal",
    "Direction des Biens sans Maître",
)
