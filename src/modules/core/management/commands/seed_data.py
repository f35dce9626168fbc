from __future__ import annotations

import random

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.clients.models import Client, ProvidedService
from modules.core.actors import Actor
from modules.orders.dtos import CollaboratorDTO, CreateServiceOrderDTO, EquipmentDTO
from modules.orders.models import ServiceOrder
from modules.orders.views import build_service_order_service
from modules.statuses.models import Status

READY_EMAIL_BODY = (
    "Olá {{clientName}},\n"
    "O equipamento {{equipment}} da OS {{osNumber}} está pronto para retirada "
    "desde {{pickupDate}}.\n"
    "Solução aplicada: {{technicalSolution}}"
)
READY_WHATSAPP_BODY = (
    "Olá {{collaboratorName}}! A OS {{osNumber}} ({{equipment}}) está "
    "pronta para retirada. Solução: {{technicalSolution}}"
)
DELIVERED_EMAIL_BODY = (
    "Olá {client_name},\n"
    "A OS {os_number}, aberta em {entry_date}, foi marcada como {status_name}.\n"
    "Obrigado pela confiança!"
)

# name, order, color, icon, flags, templates
WORKFLOW = [
    ("Aberta", 1, "#3B82F6", "folder-open", {"is_initial": True}, {}),
    ("Em Análise", 2, "#F59E0B", "search", {}, {}),
    ("Aguardando Peça", 3, "#A855F7", "package", {}, {}),
    (
        "Pronta para Entrega",
        4,
        "#22C55E",
        "check-circle",
        {
            "is_pickup_status": True,
            "triggers_email": True,
            "triggers_whatsapp": True,
        },
        {
            "email_subject": "OS {{osNumber}} pronta para retirada",
            "email_body": READY_EMAIL_BODY,
            "whatsapp_body": READY_WHATSAPP_BODY,
        },
    ),
    (
        "Entregue",
        5,
        "#6B7280",
        "truck",
        {"is_final": True, "triggers_email": True},
        {"email_body": DELIVERED_EMAIL_BODY},
    ),
]

# from -> (next, previous)
EDGES = {
    "Aberta": (["Em Análise"], []),
    "Em Análise": (["Aguardando Peça", "Pronta para Entrega"], ["Aberta"]),
    "Aguardando Peça": (["Em Análise"], []),
    "Pronta para Entrega": (["Entregue"], ["Em Análise"]),
    "Entregue": ([], []),
}


class Command(BaseCommand):
    help = "Seed database with a status workflow, clients and service orders."

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        services = self._seed_provided_services()
        clients = self._seed_clients(services)
        statuses = self._seed_statuses()
        orders_created = self._seed_orders(clients)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"services={len(services)}, "
                f"clients={len(clients)}, "
                f"statuses={len(statuses)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="supervisor").exists():
            supervisor = User.objects.create_user(
                "supervisor", password="supervisor123", first_name="Supervisor"
            )
            supervisor.user_permissions.add(
                Permission.objects.get(
                    codename="override_transition", content_type__app_label="statuses"
                )
            )
            created += 1
        if not User.objects.filter(username="tecnico").exists():
            User.objects.create_user(
                "tecnico", password="tecnico123", first_name="Técnico"
            )
            created += 1
        return created

    def _seed_provided_services(self) -> list[ProvidedService]:
        self.stdout.write("Creating provided services...")
        catalog = [
            ("Backup em Nuvem", "Backup diário dos dados do cliente."),
            ("EDR", "Proteção de endpoint com detecção e resposta."),
            ("Monitoramento", "Monitoramento remoto de estações e servidores."),
        ]
        services = []
        for name, description in catalog:
            service, _ = ProvidedService.objects.get_or_create(
                name=name, defaults={"description": description}
            )
            services.append(service)
        self.stdout.write(self.style.SUCCESS("Creating provided services... Done!"))
        return services

    def _seed_clients(self, services: list[ProvidedService]) -> list[Client]:
        self.stdout.write("Creating clients...")
        seed_clients = [
            ("Acme Tecnologia", "contato@acme.example.com", "11222333000181", 2),
            ("Padaria Pão Quente", "padaria@example.com", "", 0),
            ("Escritório Lima & Souza", "", "", 1),
        ]
        clients = []
        for name, email, cnpj, service_count in seed_clients:
            client, created = Client.objects.get_or_create(
                name=name, defaults={"email": email, "cnpj": cnpj}
            )
            if created and service_count:
                client.contracted_services.set(services[:service_count])
            clients.append(client)
        self.stdout.write(self.style.SUCCESS("Creating clients... Done!"))
        return clients

    def _seed_statuses(self) -> dict[str, Status]:
        self.stdout.write("Creating status workflow...")
        statuses: dict[str, Status] = {}
        for name, order, color, icon, flags, templates in WORKFLOW:
            status, _ = Status.objects.get_or_create(
                name=name,
                defaults={
                    "order": order,
                    "color": color,
                    "icon": icon,
                    **flags,
                    **templates,
                },
            )
            statuses[name] = status
        for name, (next_names, previous_names) in EDGES.items():
            statuses[name].allowed_next_statuses.set(
                [statuses[n] for n in next_names]
            )
            statuses[name].allowed_previous_statuses.set(
                [statuses[n] for n in previous_names]
            )
        self.stdout.write(self.style.SUCCESS("Creating status workflow... Done!"))
        return statuses

    def _seed_orders(self, clients: list[Client]) -> int:
        self.stdout.write("Creating service orders...")
        if ServiceOrder.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = build_service_order_service()
        actor = Actor(name="Seed")
        equipment = [
            ("Notebook", "Dell", "Latitude 5420"),
            ("Desktop", "Lenovo", "ThinkCentre M70"),
            ("Impressora", "HP", "LaserJet Pro M404"),
        ]
        created = 0
        for i in range(6):
            kind, brand, model = random.choice(equipment)
            service.create_order(
                CreateServiceOrderDTO(
                    client_id=random.choice(clients).id,
                    collaborator=CollaboratorDTO(
                        name=f"Colaborador {i + 1}",
                        email=f"colaborador{i + 1}@example.com",
                        phone=f"1198765{4300 + i}",
                    ),
                    equipment=EquipmentDTO(
                        type=kind,
                        brand=brand,
                        model=model,
                        serial_number=f"SN-{random.randint(100000, 999999)}",
                    ),
                    reported_problem="Equipamento não liga após queda de energia.",
                ),
                actor,
            )
            created += 1
        self.stdout.write(self.style.SUCCESS("Creating service orders... Done!"))
        return created
