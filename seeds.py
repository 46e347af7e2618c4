from carhire import create_app
from carhire.exceptions import ConflictError

DEMO_VEHICLES = [
    {
        "make": "Toyota", "modelName": "Corolla", "year": 2022, "licensePlate": "TOY2022",
        "vin": "JTDBR32E720123456", "color": "White", "mileage": 18000, "fuelType": "hybrid",
        "transmission": "automatic", "category": "economy", "dailyRate": 45,
        "features": ["Bluetooth", "Backup camera"], "images": ["/static/images/corolla.jpg"],
    },
    {
        "make": "Honda", "modelName": "Civic", "year": 2021, "licensePlate": "HON2021",
        "vin": "2HGFC2F59MH512345", "color": "Blue", "mileage": 26000, "fuelType": "gasoline",
        "transmission": "automatic", "category": "midsize", "dailyRate": 50,
        "images": ["/static/images/civic.jpg"],
    },
    {
        "make": "Ford", "modelName": "Transit", "year": 2020, "licensePlate": "FRD2020",
        "vin": "1FTBR1C80LKA12345", "color": "Grey", "mileage": 54000, "fuelType": "diesel",
        "transmission": "manual", "category": "van", "dailyRate": 95,
        "images": ["/static/images/transit.jpg"],
    },
    {
        "make": "Tesla", "modelName": "Model Y", "year": 2023, "licensePlate": "TSL2023",
        "vin": "7SAYGDEE5PF123456", "color": "Black", "mileage": 9000, "fuelType": "electric",
        "transmission": "automatic", "category": "suv", "dailyRate": 120,
        "images": ["/static/images/model-y.jpg"],
    },
]


def main():
    app = create_app()
    vehicles = app.extensions["carhire"].vehicles

    created = 0
    for payload in DEMO_VEHICLES:
        try:
            vehicles.create_vehicle(payload)
            created += 1
        except ConflictError:
            # Already seeded (plate/VIN taken)
            continue

    print(f"Seed complete: {created} vehicle(s) added.")


if __name__ == "__main__":
    main()
