"""Fixed restaurant dataset served by the get_restaurants tool."""

DEFAULT_IMAGE_BASE_URL = "http://localhost:10002"

RESTAURANT_DATA = [
    {
        "name": "Xi'an Famous Foods",
        "detail": "Spicy and savory hand-pulled noodles.",
        "imageUrl": "http://localhost:10002/static/shrimpchowmein.jpeg",
        "rating": "★★★★☆",
        "infoLink": "[More Info](https://www.xianfoods.com/)",
        "address": "81 St Marks Pl, New York, NY 10003",
    },
    {
        "name": "Han Dynasty",
        "detail": "Authentic Szechuan cuisine.",
        "imageUrl": "http://localhost:10002/static/mapotofu.jpeg",
        "rating": "★★★★☆",
        "infoLink": "[More Info](https://www.handynasty.net/)",
        "address": "90 3rd Ave, New York, NY 10003",
    },
    {
        "name": "RedFarm",
        "detail": "Modern Chinese with a farm-to-table approach.",
        "imageUrl": "http://localhost:10002/static/beefbroccoli.jpeg",
        "rating": "★★★★☆",
        "infoLink": "[More Info](https://www.redfarmnyc.com/)",
        "address": "529 Hudson St, New York, NY 10014",
    },
    {
        "name": "Mott 32",
        "detail": "Upscale Cantonese dining.",
        "imageUrl": "http://localhost:10002/static/springrolls.jpeg",
        "rating": "★★★★★",
        "infoLink": "[More Info](https://mott32.com/newyork/)",
        "address": "111 W 57th St, New York, NY 10019",
    },
    {
        "name": "Hwa Yuan Szechuan",
        "detail": "Famous for its cold noodles with sesame sauce.",
        "imageUrl": "http://localhost:10002/static/kungpao.jpeg",
        "rating": "★★★★☆",
        "infoLink": "[More Info](https://hwayuannyc.com/)",
        "address": "40 E Broadway, New York, NY 10002",
    },
    {
        "name": "Cafe China",
        "detail": "Szechuan food in a 1930s Shanghai setting.",
        "imageUrl": "http://localhost:10002/static/mapotofu.jpeg",
        "rating": "★★★★☆",
        "infoLink": "[More Info](https://www.cafechinanyc.com/)",
        "address": "59 W 37th St, New York, NY 10018",
    },
    {
        "name": "Philippe Chow",
        "detail": "High-end Beijing-style cuisine.",
        "imageUrl": "http://localhost:10002/static/beefbroccoli.jpeg",
        "rating": "★★★★☆",
        "infoLink": "[More Info](https://www.philippechow.com/)",
        "address": "33 E 60th St, New York, NY 10022",
    },
    {
        "name": "Chinese Tuxedo",
        "detail": "Contemporary Chinese in a former opera house.",
        "imageUrl": "http://localhost:10002/static/mapotofu.jpeg",
        "rating": "★★★★☆",
        "infoLink": "[More Info](https://chinesetuxedo.com/)",
        "address": "5 Doyers St, New York, NY 10013",
    },
]
