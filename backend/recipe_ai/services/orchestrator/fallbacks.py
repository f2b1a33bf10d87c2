"""Pre-authored recipes served when AI generation is unavailable.

Only used under the tolerant fallback policy. Every recipe built here gets a
fresh id with a ``fallback``/``weekly`` prefix so it can never be confused
with an AI result.
"""

import random
from uuid import uuid4

from recipe_ai.models import Difficulty, Recipe

_RECIPES: list[dict] = [
    {
        "title": "Honey Garlic Chicken",
        "description": "Tender chicken glazed with a perfect balance of sweet honey and savory garlic",
        "ingredients": [
            "4 boneless chicken breasts (1.5 lbs)",
            "1/3 cup honey",
            "4 cloves garlic, minced",
            "3 tbsp soy sauce",
            "2 tbsp olive oil",
            "1 tsp fresh ginger, grated",
            "2 green onions, chopped",
            "1 tsp sesame seeds",
            "Salt and pepper to taste",
        ],
        "instructions": [
            "Season chicken breasts with salt and pepper on both sides",
            "Heat olive oil in a large skillet over medium-high heat",
            "Cook chicken for 6-7 minutes per side until golden brown and cooked through",
            "In a small bowl, whisk together honey, minced garlic, soy sauce, and ginger",
            "Pour the honey garlic sauce over the chicken in the skillet",
            "Cook for 2-3 minutes, turning chicken to coat with the glaze",
            "Garnish with chopped green onions and sesame seeds",
            "Let rest for 2 minutes before serving",
        ],
        "cooking_time": 20,
        "servings": 4,
        "difficulty": Difficulty.EASY,
        "tags": ["chicken", "asian-inspired", "dinner", "gluten-free", "quick"],
        "keywords": ("chicken", "honey", "garlic"),
    },
    {
        "title": "Mediterranean Quinoa Power Bowl",
        "description": "A colorful bowl packed with Mediterranean flavors and plant-based protein",
        "ingredients": [
            "1 cup quinoa, rinsed",
            "2 cups vegetable broth",
            "1 cucumber, diced",
            "2 large tomatoes, diced",
            "1/2 red onion, thinly sliced",
            "1/2 cup kalamata olives, pitted",
            "4 oz feta cheese, crumbled",
            "1/4 cup extra virgin olive oil",
            "3 tbsp fresh lemon juice",
            "2 tbsp fresh parsley, chopped",
            "1 tsp dried oregano",
        ],
        "instructions": [
            "Cook quinoa in vegetable broth according to package directions, then let cool",
            "Combine cooled quinoa, cucumber, tomatoes, and red onion in a large bowl",
            "Add kalamata olives and crumbled feta cheese",
            "Whisk together olive oil, lemon juice, oregano, salt, and pepper",
            "Pour dressing over the quinoa mixture and toss gently",
            "Fold in fresh parsley and let sit for 10 minutes before serving",
        ],
        "cooking_time": 25,
        "servings": 4,
        "difficulty": Difficulty.EASY,
        "tags": ["vegetarian", "mediterranean", "healthy", "meal-prep", "gluten-free"],
        "keywords": ("healthy", "vegetarian", "quinoa", "mediterranean"),
    },
    {
        "title": "Classic Beef Stir-Fry",
        "description": "Quick and flavorful beef stir-fry with crisp vegetables in a savory sauce",
        "ingredients": [
            "1 lb beef sirloin, sliced thin against the grain",
            "2 tbsp vegetable oil, divided",
            "1 bell pepper, sliced",
            "1 onion, sliced",
            "2 carrots, julienned",
            "3 cloves garlic, minced",
            "1 tbsp fresh ginger, grated",
            "3 tbsp soy sauce",
            "1 tbsp oyster sauce",
            "1 tsp cornstarch",
            "Cooked rice for serving",
        ],
        "instructions": [
            "Marinate sliced beef with 1 tbsp soy sauce and cornstarch for 15 minutes",
            "Stir-fry beef in 1 tbsp oil over high heat for 2-3 minutes, then set aside",
            "Stir-fry carrots, onion and bell pepper in the remaining oil",
            "Add garlic and ginger and cook for 30 seconds until fragrant",
            "Return beef to the pan with remaining soy sauce and oyster sauce",
            "Toss for 1-2 minutes and serve immediately over rice",
        ],
        "cooking_time": 18,
        "servings": 4,
        "difficulty": Difficulty.EASY,
        "tags": ["beef", "asian", "stir-fry", "quick", "dinner"],
        "keywords": ("beef", "stir", "quick"),
    },
]

_WEEKLY_PLAN: list[dict] = [
    {
        "title": "Monday: Lemon Herb Grilled Chicken",
        "description": "Juicy grilled chicken with fresh herbs and lemon",
        "ingredients": ["4 chicken breasts", "2 lemons", "Fresh herbs", "Olive oil", "Garlic"],
        "instructions": ["Marinate chicken", "Grill until cooked through", "Serve with lemon"],
        "cooking_time": 25,
        "difficulty": Difficulty.EASY,
        "tags": ["chicken", "grilled", "healthy"],
    },
    {
        "title": "Tuesday: Vegetable Pasta Primavera",
        "description": "Fresh seasonal vegetables tossed with pasta",
        "ingredients": ["Pasta", "Mixed vegetables", "Olive oil", "Garlic", "Parmesan"],
        "instructions": ["Cook pasta", "Sauté vegetables", "Combine and serve"],
        "cooking_time": 20,
        "difficulty": Difficulty.EASY,
        "tags": ["pasta", "vegetarian", "quick"],
    },
    {
        "title": "Wednesday: Asian Salmon Bowls",
        "description": "Glazed salmon over rice with vegetables",
        "ingredients": ["Salmon fillets", "Rice", "Soy sauce", "Honey", "Vegetables"],
        "instructions": ["Cook rice", "Glaze and cook salmon", "Assemble bowls"],
        "cooking_time": 30,
        "difficulty": Difficulty.MEDIUM,
        "tags": ["salmon", "asian", "healthy"],
    },
    {
        "title": "Thursday: Mexican Black Bean Tacos",
        "description": "Flavorful vegetarian tacos with black beans",
        "ingredients": ["Black beans", "Tortillas", "Avocado", "Lime", "Cilantro"],
        "instructions": ["Season beans", "Warm tortillas", "Assemble tacos"],
        "cooking_time": 15,
        "difficulty": Difficulty.EASY,
        "tags": ["mexican", "vegetarian", "quick"],
    },
    {
        "title": "Friday: Beef and Mushroom Stir-Fry",
        "description": "Tender beef with mushrooms in savory sauce",
        "ingredients": ["Beef strips", "Mushrooms", "Soy sauce", "Garlic", "Rice"],
        "instructions": ["Stir-fry beef", "Add mushrooms", "Serve over rice"],
        "cooking_time": 18,
        "difficulty": Difficulty.EASY,
        "tags": ["beef", "stir-fry", "asian"],
    },
    {
        "title": "Saturday: Mediterranean Stuffed Peppers",
        "description": "Bell peppers stuffed with Mediterranean flavors",
        "ingredients": ["Bell peppers", "Quinoa", "Feta", "Tomatoes", "Herbs"],
        "instructions": ["Prepare filling", "Stuff peppers", "Bake until tender"],
        "cooking_time": 45,
        "difficulty": Difficulty.MEDIUM,
        "tags": ["mediterranean", "vegetarian", "baked"],
    },
    {
        "title": "Sunday: Comfort Food Chicken Soup",
        "description": "Hearty homemade chicken soup",
        "ingredients": ["Chicken", "Vegetables", "Broth", "Noodles", "Herbs"],
        "instructions": ["Simmer chicken", "Add vegetables", "Serve hot"],
        "cooking_time": 60,
        "servings": 6,
        "difficulty": Difficulty.EASY,
        "tags": ["soup", "comfort-food", "chicken"],
    },
]


def _build(template: dict, id_prefix: str) -> Recipe:
    fields = {k: v for k, v in template.items() if k != "keywords"}
    return Recipe(id=f"{id_prefix}_{uuid4().hex[:12]}", **fields)


def fallback_recipe(prompt: str, rng: random.Random) -> Recipe:
    """Pick the repertoire recipe whose keywords appear first in the prompt.

    With no keyword match a random recipe is returned for variety.
    """
    lowered = prompt.lower()
    for template in _RECIPES:
        if any(word in lowered for word in template["keywords"]):
            return _build(template, "fallback")
    return _build(rng.choice(_RECIPES), "fallback")


def fallback_meal_plan() -> list[Recipe]:
    return [_build(template, "weekly") for template in _WEEKLY_PLAN]


def replacement_recipes(
    current_plan: list[Recipe],
    disliked_ids: set[str],
    rng: random.Random,
) -> list[Recipe]:
    """Swap each disliked recipe for a repertoire recipe not already in the plan.

    Recipes the user did not dislike are kept unchanged. When the repertoire
    runs out, the disliked recipe is kept as-is.
    """
    in_plan = {r.title for r in current_plan}
    candidates = [t for t in _RECIPES + _WEEKLY_PLAN if t["title"] not in in_plan]
    rng.shuffle(candidates)
    adjusted = []
    for recipe in current_plan:
        if recipe.id in disliked_ids and candidates:
            adjusted.append(_build(candidates.pop(), "fallback"))
        else:
            adjusted.append(recipe)
    return adjusted
