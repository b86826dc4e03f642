"""Static reference data loaded into catalog_items when the schema is created."""

from decimal import Decimal

# (name, cost, category, calories)
SEED_CATALOG = [
    ("Spicy Tuna Roll", Decimal("8.50"), "Sushi", 300),
    ("Quinoa Power Bowl", Decimal("12.00"), "Vegan", 450),
    ("Artisan Cheeseburger", Decimal("10.50"), "Fast Food", 600),
    ("Margherita Pizza", Decimal("14.00"), "Italian", 800),
    ("Chicken Caesar Salad", Decimal("9.75"), "Salad", 350),
    ("Beef Tacos (3)", Decimal("7.50"), "Mexican", 480),
    ("Pad Thai", Decimal("11.25"), "Thai", 550),
    ("Miso Soup", Decimal("3.50"), "Japanese", 80),
    ("Falafel Wrap", Decimal("8.00"), "Vegan", 400),
    ("Grilled Salmon", Decimal("15.50"), "Seafood", 500),
    ("Avocado Toast", Decimal("6.75"), "Breakfast", 250),
    ("Clam Chowder", Decimal("5.50"), "Soup", 320),
    ("BBQ Ribs", Decimal("18.00"), "American", 900),
    ("Veggie Burger", Decimal("9.00"), "Vegan", 420),
    ("Fish and Chips", Decimal("13.25"), "British", 750),
    ("Sashimi Platter", Decimal("16.50"), "Sushi", 400),
    ("French Onion Soup", Decimal("6.00"), "French", 380),
    ("Steak Frites", Decimal("22.00"), "French", 850),
    ("Mushroom Risotto", Decimal("12.50"), "Italian", 600),
    ("Chocolate Lava Cake", Decimal("7.00"), "Dessert", 450),
]
