from django.contrib import admin

from store.models import DailyCounter, LoyaltyRule, SequenceCounter, Setting, StoreInfo


@admin.register(StoreInfo)
class StoreInfoAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "updated_at")


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key",)


@admin.register(LoyaltyRule)
class LoyaltyRuleAdmin(admin.ModelAdmin):
    list_display = ("name", "points_per_currency", "min_purchase_amount", "is_active")
    list_filter = ("is_active",)


@admin.register(DailyCounter)
class DailyCounterAdmin(admin.ModelAdmin):
    list_display = ("prefix", "day", "last_value")
    list_filter = ("prefix",)


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    list_display = ("prefix", "last_value")
