"""
e-Foncier Backend: Test Data Generator
=======================================

What:  Fills the register with plausible Congolese parcels, agent notes and
       citizen requests for demonstrations and manual testing.
How:   A private `random.Random` drives every choice; passing `seed` makes
       the generated data reproducible. Rows are inserted through the ORM in
       the request's transaction, so a failed run leaves nothing behind.
"""

import logging
import random
from datetime import timedelta
from typing import List, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.config import settings
from efoncier.exceptions import ValidationError
from efoncier.models.document_request import DocumentRequest
from efoncier.models.parcel import Parcel, utcnow
from efoncier.models.parcel_note import ParcelNote
from efoncier.schemas.seed import SeedRequest, SeedResponse
from efoncier.vocabulary import (
    ACQUISITION_TYPES,
    ISSUING_AUTHORITIES,
    LAND_USES,
    PARCEL_STATUSES,
    REQUEST_STATUSES,
    REQUESTABLE_DOCUMENTS,
    STATUS_DISPUTED,
    STATUS_MORTGAGED,
)

logger = logging.getLogger(__name__)

# province → (city, approximate latitude, approximate longitude, communes)
LOCALITIES = {
    "Kinshasa": ("Kinshasa", -4.325, 15.322, ("Gombe", "Limete", "Ngaliema", "Kintambo", "Lemba", "Masina")),
    "Haut-Katanga": ("Lubumbashi", -11.664, 27.482, ("Lubumbashi", "Kampemba", "Kenya", "Annexe")),
    "Nord-Kivu": ("Goma", -1.679, 29.228, ("Goma", "Karisimbi")),
    "Sud-Kivu": ("Bukavu", -2.508, 28.861, ("Ibanda", "Kadutu", "Bagira")),
    "Kongo Central": ("Matadi", -5.816, 13.450, ("Matadi", "Nzanza", "Mvuzi")),
    "Tshopo": ("Kisangani", 0.515, 25.191, ("Makiso", "Tshopo", "Kabondo", "Mangobo")),
    "Kasaï Oriental": ("Mbuji-Mayi", -6.136, 23.590, ("Bipemba", "Dibindi", "Kanshi", "Muya")),
    "Kasaï Central": ("Kananga", -5.896, 22.417, ("Kananga", "Katoka", "Ndesha")),
    "Lualaba": ("Kolwezi", -10.716, 25.473, ("Dilala", "Manika")),
    "Équateur": ("Mbandaka", 0.048, 18.260, ("Mbandaka", "Wangata")),
}

QUARTIERS = ("Quartier 1", "Quartier Résidentiel", "Quartier Industriel", "Cité Verte", "Camp Luka", "Mont Fleury")
AVENUES = ("Av. de la Justice", "Av. du Commerce", "Av. Kasa-Vubu", "Av. Lumumba", "Av. des Aviateurs", "Boulevard du 30 Juin")
FIRST_NAMES = ("Jean", "Marie", "Patrick", "Chantal", "Joseph", "Grâce", "Didier", "Esther", "Papy", "Nathalie")
LAST_NAMES = ("Kabila", "Mbuyi", "Tshimanga", "Ilunga", "Mukendi", "Kasongo", "Lukusa", "Nzuzi", "Mbala", "Kalonji")
COMPANIES = ("Congo Immobilier SARL", "Kivu Agro SA", "Batir RDC SARL", "Katanga Logistique SA")
NOTE_TEXTS = (
    "Visite de terrain effectuée, bornes conformes au plan.",
    "Dossier transmis au conservateur des titres immobiliers.",
    "Le propriétaire doit fournir une copie de sa pièce d'identité.",
    "Vérification du PV de bornage en cours.",
    "Paiement des frais cadastraux confirmé.",
)
LITIGATIONS = (
    "Contestation des limites par le voisin.",
    "Double attribution signalée au cadastre.",
    "Succession contestée par les héritiers.",
)


class SeedService:

    def _person(self, rng: random.Random) -> str:
        return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"

    def _reference(self, rng: random.Random, city: str, taken: Set[str]) -> str:
        prefix = "".join(ch for ch in city.upper() if ch.isalpha())[:3]
        while True:
            reference = f"{prefix}-{rng.randint(1000, 99999):05d}"
            if reference not in taken:
                taken.add(reference)
                return reference

    def _parcel(self, rng: random.Random, reference: str, province: str) -> Parcel:
        city, lat, long, communes = LOCALITIES[province]
        status = rng.choice(PARCEL_STATUSES)
        is_company = rng.random() < 0.2
        # About one parcel in four is still waiting for its title paperwork.
        validated = rng.random() >= 0.25
        created_at = utcnow() - timedelta(days=rng.randint(0, 360), minutes=rng.randint(0, 1440))

        return Parcel(
            reference=reference,
            parcel_number=f"SU {rng.randint(100, 9999)}",
            province=province,
            territory_or_city=city,
            commune_or_sector=rng.choice(communes),
            quartier_or_cheflieu=rng.choice(QUARTIERS),
            avenue=f"{rng.choice(AVENUES)} n°{rng.randint(1, 250)}",
            gps_lat=round(lat + rng.uniform(-0.05, 0.05), 6),
            gps_long=round(long + rng.uniform(-0.05, 0.05), 6),
            area=float(rng.choice((300, 450, 500, 600, 800, 1000, 1500, 2500, 5000))),
            status=status,
            land_use=rng.choice(LAND_USES),
            certificate_number=f"CE-{rng.randint(10000, 99999)}" if validated else "",
            issuing_authority=rng.choice(ISSUING_AUTHORITIES) if validated else "",
            acquisition_type=rng.choice(ACQUISITION_TYPES),
            acquisition_act_ref=f"ACTE-{created_at.year}-{rng.randint(100, 9999)}",
            title_date=(created_at - timedelta(days=rng.randint(30, 3650))).date().isoformat(),
            owner_name=self._person(rng),
            owner_id_number=f"CD{rng.randint(10**8, 10**9 - 1)}",
            company_name=rng.choice(COMPANIES) if is_company else None,
            rccm=f"CD/{city[:3].upper()}/RCCM/{rng.randint(10, 24)}-B-{rng.randint(1000, 9999)}" if is_company else None,
            nif=f"A{rng.randint(1000000, 9999999)}K" if is_company else None,
            surveying_pv_ref=f"PV-{rng.randint(1000, 9999)}",
            surveyor_name=self._person(rng),
            surveyor_license=f"GEO-{rng.randint(100, 999)}",
            cadastral_plan_ref=f"PLAN-{rng.randint(1000, 9999)}" if validated else "",
            charges="Hypothèque au profit de la banque" if status == STATUS_MORTGAGED else None,
            litigation=rng.choice(LITIGATIONS) if status == STATUS_DISPUTED else None,
            created_at=created_at,
            updated_at=created_at,
        )

    async def seed(self, db: AsyncSession, payload: SeedRequest) -> SeedResponse:
        """
        Generates parcels, notes and citizen requests.

        Raises:
            ValidationError: a count exceeds SEED_MAX_COUNT (→ 400)
        """
        for field in ("count", "requests"):
            if getattr(payload, field) > settings.seed_max_count:
                raise ValidationError(
                    message=f"Invalid field: {field} (maximum {settings.seed_max_count})",
                    field=field,
                )

        rng = random.Random(payload.seed)
        existing = await db.execute(select(Parcel.reference))
        taken: Set[str] = {reference for (reference,) in existing.all()}

        parcels: List[Parcel] = []
        for _ in range(payload.count):
            province = rng.choice(tuple(LOCALITIES))
            reference = self._reference(rng, LOCALITIES[province][0], taken)
            parcel = self._parcel(rng, reference, province)
            db.add(parcel)
            parcels.append(parcel)
        await db.flush()

        notes = 0
        for parcel in parcels:
            for _ in range(rng.randint(0, payload.notes_per_parcel)):
                db.add(
                    ParcelNote(
                        parcel_id=parcel.id,
                        note=rng.choice(NOTE_TEXTS),
                        author=self._person(rng),
                        created_at=parcel.created_at,
                        updated_at=parcel.created_at,
                    )
                )
                notes += 1

        for _ in range(payload.requests):
            target = rng.choice(parcels)
            requested_at = utcnow() - timedelta(days=rng.randint(0, 60), hours=rng.randint(0, 23))
            db.add(
                DocumentRequest(
                    citizen_name=self._person(rng),
                    parcel_reference=target.reference,
                    document_type=rng.choice(REQUESTABLE_DOCUMENTS),
                    status=rng.choice(REQUEST_STATUSES),
                    created_at=requested_at,
                    updated_at=requested_at,
                )
            )
        await db.flush()

        logger.info(
            "Seeded %d parcels, %d notes and %d requests (seed=%s)",
            len(parcels),
            notes,
            payload.requests,
            payload.seed,
        )
        return SeedResponse(
            parcels=len(parcels),
            requests=payload.requests,
            notes=notes,
            references=[parcel.reference for parcel in parcels],
        )


seed_service = SeedService()
