# Demo catalog used when no Mongo database is configured (motorcycle parts store).
SAMPLE_PRODUCTS = [
    {
        "product_id": "1",
        "name": 'Reinforced 21" inner tube',
        "category": "Accesorios",
        "price": 9800,
        "cost": 6500,
        "stock": 24,
        "ai_score": 0.89,
        "demand_trend": "up",
        "reorder_point": 10,
        "max_stock": 60,
        "sales_30_days": 18,
    },
    {
        "product_id": "2",
        "name": "Tyre 80/100-21",
        "category": "Neumáticos",
        "price": 56000,
        "cost": 42000,
        "stock": 8,
        "ai_score": 0.95,
        "demand_trend": "up",
        "reorder_point": 15,
        "max_stock": 40,
        "sales_30_days": 22,
    },
    {
        "product_id": "3",
        "name": "Tyre 110/100-18",
        "category": "Neumáticos",
        "price": 74000,
        "cost": 55000,
        "stock": 5,
        "ai_score": 0.72,
        "demand_trend": "stable",
        "reorder_point": 12,
        "max_stock": 30,
        "sales_30_days": 14,
    },
    {
        "product_id": "4",
        "name": "Chain and sprocket kit",
        "category": "Transmisión",
        "price": 89000,
        "cost": 65000,
        "stock": 12,
        "ai_score": 0.83,
        "demand_trend": "up",
        "reorder_point": 8,
        "max_stock": 25,
        "sales_30_days": 9,
    },
    {
        "product_id": "5",
        "name": "K&N air filter",
        "category": "Filtros",
        "price": 25000,
        "cost": 18000,
        "stock": 35,
        "ai_score": 0.76,
        "demand_trend": "stable",
        "reorder_point": 20,
        "max_stock": 80,
        "sales_30_days": 27,
    },
    {
        "product_id": "6",
        "name": "Front brake pads",
        "category": "Frenos",
        "price": 15000,
        "cost": 10500,
        "stock": 45,
        "ai_score": 0.68,
        "demand_trend": "stable",
        "reorder_point": 25,
        "max_stock": 100,
        "sales_30_days": 31,
    },
]
