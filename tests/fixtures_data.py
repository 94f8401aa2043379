"""Conjunto de dados reutilizável para cenários de teste backend."""

STRONG_PASSWORD = "Senha123"

ADMIN_PAYLOAD = {
    "name": "Ravi Sharma",
    "email": "dono@spicegarden.in",
    "password": STRONG_PASSWORD,
    "productKey": "RPK-2024-ADMIN-001",
    "restaurantName": "Spice Garden",
    "restaurantAddress": {
        "street": "MG Road, 12",
        "city": "Bengaluru",
        "state": "KA",
        "zipCode": "560001",
    },
    "restaurantPhone": "+91 80 5555 0101",
}

OTHER_ADMIN_PAYLOAD = {
    "name": "Ana Costa",
    "email": "ana@tandoorhouse.in",
    "password": STRONG_PASSWORD,
    "product_key": "RPK-2024-ADMIN-002",
    "restaurant_name": "Tandoor House",
}

CASHIER_PAYLOAD = {
    "name": "Priya Nair",
    "email": "priya@spicegarden.in",
    "password": "caixa123",
    "role": "cashier",
    "phone": "+91 98 0000 1111",
    "salary": 25000,
}

MANAGER_PAYLOAD = {
    "name": "Arjun Mehta",
    "email": "arjun@spicegarden.in",
    "password": "gerente123",
    "role": "manager",
    "salary": 52000.5,
}

KITCHEN_PAYLOAD = {
    "name": "Lakshmi Iyer",
    "email": "lakshmi@spicegarden.in",
    "password": "cozinha123",
    "role": "kitchen",
}

INVALID_CREDENTIALS_MESSAGE = "Credenciais inválidas"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
