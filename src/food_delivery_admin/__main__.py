import uvicorn

from food_delivery_admin.config import settings

if __name__ == "__main__":
    uvicorn.run("food_delivery_admin.main:app", host="0.0.0.0", port=settings.PORT)
