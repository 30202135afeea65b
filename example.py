"""Example usage of the keypaths library."""

import operator
from dataclasses import dataclass

from keypaths import KeyPath, TypeRegistry, sorted_on

registry = TypeRegistry()


@registry.register
@dataclass(frozen=True)
class Food:
    name: str
    calories: float


@registry.register
@dataclass(frozen=True)
class Cat:
    name: str
    favorite_food: Food


# Chaining
food_key_path = KeyPath.of(Cat, "favorite_food")
calories_key_path = food_key_path.appending(KeyPath.of(Food, "calories"))

skittles = Food(name="Skittles", calories=999)
whiskers = Cat(name="Whiskers", favorite_food=skittles)

print(f"{calories_key_path} of {whiskers.name}: {calories_key_path.read(whiskers)}")

# Writing through a value-typed chain returns an updated copy
lighter = calories_key_path.write(whiskers, 500)
print(f"Lighter {lighter.name}: {calories_key_path.read(lighter)} kcal "
      f"(original still {calories_key_path.read(whiskers)} kcal)")

# Sorting
tacco = Cat(name="Tacco", favorite_food=Food(name="Tacco \N{TACO}", calories=723))
nala = Cat(name="Nala", favorite_food=Food(name="Fish \N{FISH}", calories=340))

cats = [whiskers, tacco, nala]
sorted_by_name = sorted_on(cats, KeyPath.of(Cat, "name"), by=operator.lt)
sorted_by_favourite_food_kcal = sorted_on(
    cats, KeyPath.parse(r"\Cat.favorite_food.calories", registry), by=operator.lt
)

print("\nSorted by name:")
for cat in sorted_by_name:
    print(f"  {cat.name}")

print("\nSorted by favourite food calories:")
for cat in sorted_by_favourite_food_kcal:
    print(f"  {cat.name} ({cat.favorite_food.name}, {cat.favorite_food.calories} kcal)")
