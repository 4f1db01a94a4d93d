from discount_app.models.discount import DiscountRuleRecord
from discount_app.models.analytics import ProductAnalytics

# add ALL models here
